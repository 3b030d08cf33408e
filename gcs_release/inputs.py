"""Resolution of named workflow inputs from the environment and .env files.

An input such as ``from-path`` is looked up under several variable names (see
:func:`env_names`) in each source in turn: the process environment first, then
every ``.env`` file registered with :func:`use_dotenv`, in registration order.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from dotenv import dotenv_values


@dataclass(frozen=True)
class InputSpec:
    name: str
    description: str = ""
    required: bool = False
    aliases: Tuple[str, ...] = ()


@dataclass(frozen=True)
class InputAttempt:
    source: str
    path: Optional[str]
    success: bool

    @property
    def label(self) -> str:
        return f"{self.source}@{self.path}" if self.path else self.source


@dataclass(frozen=True)
class InputResolutionInfo:
    name: str
    value: Optional[str]
    source: Optional[str]
    variable: Optional[str]
    attempts: List[InputAttempt]


def env_names(name: str, aliases: Tuple[str, ...] = ()) -> List[str]:
    """Environment variable names consulted for an input such as ``from-path``."""

    normalized = name.replace("-", "_").upper()
    names = [f"GCS_RELEASE_{normalized}", f"INPUT_{normalized}", f"INPUT_{name.upper()}", *aliases]
    return list(dict.fromkeys(names))


class EnvSource:
    source = "env"
    path: Optional[str] = None

    def values(self) -> Dict[str, str]:
        return dict(os.environ)


class DotEnvSource:
    """Variables of a ``.env`` file, parsed once on first use."""

    source = "dotenv"

    def __init__(self, path: Path) -> None:
        self.path = str(path)
        self._values: Optional[Dict[str, str]] = None

    def values(self) -> Dict[str, str]:
        if self._values is None:
            parsed = dotenv_values(self.path) if Path(self.path).exists() else {}
            self._values = {key: value for key, value in parsed.items() if value is not None}
        return self._values


_input_specs: Dict[str, InputSpec] = {}
_sources: List[Union[EnvSource, DotEnvSource]] = [EnvSource()]


def register_input(spec: InputSpec) -> None:
    _input_specs.setdefault(spec.name, spec)


def use_dotenv(path: Union[str, Path]) -> None:
    _sources.append(DotEnvSource(Path(path)))


def reset_sources() -> None:
    """Forget registered ``.env`` files; only the process environment remains."""

    _sources[:] = [EnvSource()]


def resolve_input(name: str) -> Optional[str]:
    return resolve_input_info(name).value


def resolve_input_info(name: str) -> InputResolutionInfo:
    spec = _input_specs.get(name, InputSpec(name=name))
    names = env_names(spec.name, spec.aliases)
    attempts: List[InputAttempt] = []

    for source in _sources:
        values = source.values()
        variable = next((candidate for candidate in names if values.get(candidate)), None)
        attempts.append(InputAttempt(source=source.source, path=source.path, success=variable is not None))
        if variable is not None:
            return InputResolutionInfo(spec.name, values[variable], source.source, variable, attempts)

    return InputResolutionInfo(spec.name, None, None, None, attempts)


def format_attempts(info: InputResolutionInfo) -> str:
    labels = [f"{attempt.label} ({'resolved' if attempt.success else 'missing'})" for attempt in info.attempts]
    return ", ".join(labels) if labels else "none"


def list_inputs() -> List[InputSpec]:
    return list(_input_specs.values())


def describe_input(name: str) -> Dict[str, object]:
    spec = _input_specs.get(name, InputSpec(name=name))
    info = resolve_input_info(name)
    return {
        "name": spec.name,
        "description": spec.description,
        "required": spec.required,
        "env": env_names(spec.name, spec.aliases),
        "present": info.value is not None,
        "source": info.source,
        "variable": info.variable,
        "attempts": [
            {"source": attempt.source, "path": attempt.path, "success": attempt.success}
            for attempt in info.attempts
        ],
    }
