# gate.py
# Precondition checks that run before any step is allowed to touch the outside world.

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Tuple

from .errors import MissingConfiguration


@dataclass(frozen=True)
class GateResult:
    required: Tuple[str, ...]
    missing: Tuple[str, ...]

    @property
    def ok(self) -> bool:
        return not self.missing


def _is_set(environ: Mapping[str, str], name: str) -> bool:
    value = environ.get(name)
    return value is not None and value.strip() != ""


def check_environment(required: Iterable[str], environ: Mapping[str, str]) -> GateResult:
    """
    Check every required name against the environment snapshot.

    All names are checked; nothing stops at the first miss. Missing names
    come back in declaration order, each reported once.
    """
    names: list[str] = []
    for name in required:
        if name not in names:
            names.append(name)

    missing = tuple(n for n in names if not _is_set(environ, n))
    return GateResult(required=tuple(names), missing=missing)


def require_environment(required: Iterable[str], environ: Mapping[str, str]) -> GateResult:
    """Like check_environment, but raises MissingConfiguration when anything is missing."""
    result = check_environment(required, environ)
    if not result.ok:
        raise MissingConfiguration(missing=result.missing)
    return result
