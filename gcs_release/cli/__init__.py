"""CLI package for gcs-release."""
