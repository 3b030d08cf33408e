"""Fan-out deployment of a local folder to every selected bucket."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional, Sequence

from ..errors import ACLError, CopyError
from ..schemas.deploy import Bucket, DeploymentRequest, destination_uri
from ..storage.clients import ACLGranter, ObjectCopier
from .models import DeploymentOutcome, DeploymentResult, FailurePolicy

if TYPE_CHECKING:
    from ..summary import SummarySink

logger = logging.getLogger(__name__)


def deploy(
    selected: Sequence[Bucket],
    request: DeploymentRequest,
    *,
    copier: ObjectCopier,
    acl: ACLGranter,
    policy: FailurePolicy = FailurePolicy.FAIL_FAST,
    sink: Optional[SummarySink] = None,
) -> DeploymentResult:
    """Copy ``request.effective_source`` into each bucket, in order.

    Under ``FAIL_FAST`` the first ``CopyError`` or ``ACLError`` propagates and
    later buckets are not touched; outcomes already produced have been handed
    to ``sink``. Under ``BEST_EFFORT`` the failure is recorded and the loop
    continues.
    """

    result = DeploymentResult(policy=policy, selected=[bucket.id for bucket in selected])

    def record(outcome: DeploymentOutcome) -> None:
        result.outcomes.append(outcome)
        if sink is not None:
            sink.append(outcome)

    if not selected:
        result.logs.append("No bucket matched; deployment skipped.")
        record(DeploymentOutcome.skipped(request))
        result.finished_at = datetime.now(timezone.utc)
        return result

    source = request.effective_source
    for bucket in selected:
        destination = destination_uri(bucket.id, request.destination_path)
        outcome = DeploymentOutcome(
            status="succeeded",
            source_path=source,
            bucket=bucket.id,
            destination_path=destination,
        )

        logger.info("Uploading %s to %s", source, destination)
        try:
            copier.copy(source, destination, header=request.header, gzip_encoding=request.gzip_encoding)
        except CopyError as exc:
            if policy is FailurePolicy.FAIL_FAST:
                raise
            logger.error("Upload to %s failed: %s", destination, exc)
            result.logs.append(f"Upload of {source} to {destination} failed: {exc}")
            outcome.status = "failed"
            outcome.error = str(exc)
            record(outcome)
            continue
        outcome.uploaded = True
        result.logs.append(f"Uploaded {source} to {destination}.")

        if request.public_read:
            logger.info("Granting public read on %s", bucket.id)
            try:
                acl.grant_public_read(bucket.id)
            except ACLError as exc:
                if policy is FailurePolicy.FAIL_FAST:
                    raise
                # Objects stay in the bucket; only the grant is reported.
                logger.error("Granting public read on %s failed: %s", bucket.id, exc)
                result.logs.append(f"Granting public read on {bucket.id} failed: {exc}")
                outcome.status = "failed"
                outcome.error = str(exc)
                record(outcome)
                continue
            outcome.public_read = True

        record(outcome)

    result.finished_at = datetime.now(timezone.utc)
    return result
