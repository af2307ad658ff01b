from __future__ import annotations

from typing import Dict, List, Tuple


DEPLOYS = "factmarket_deploys"
DEPLOY_ERRORS = "factmarket_deploy_errors"
REGISTRATIONS = "registry_registrations"
ATTACH_ERRORS = "attach_errors"

_COUNTERS: Dict[str, int] = {}
_BY_BACKEND: Dict[Tuple[str, str], int] = {}


def _bump_backend(name: str, backend: str) -> None:
    key = (name, backend)
    _BY_BACKEND[key] = _BY_BACKEND.get(key, 0) + 1


def _bump(name: str) -> None:
    _COUNTERS[name] = _COUNTERS.get(name, 0) + 1


def record_deploy(backend: str) -> None:
    """Count a deployment routed to ``backend`` (before the strategy runs)."""
    _bump_backend(DEPLOYS, backend)


def record_deploy_error(backend: str) -> None:
    """Count a submission the backend rejected or failed to complete."""
    _bump_backend(DEPLOY_ERRORS, backend)


def record_registration() -> None:
    _bump(REGISTRATIONS)


def record_attach_error() -> None:
    _bump(ATTACH_ERRORS)


def deploys(backend: str) -> int:
    return _BY_BACKEND.get((DEPLOYS, backend), 0)


def deploy_errors(backend: str) -> int:
    return _BY_BACKEND.get((DEPLOY_ERRORS, backend), 0)


def registrations() -> int:
    return _COUNTERS.get(REGISTRATIONS, 0)


def attach_errors() -> int:
    return _COUNTERS.get(ATTACH_ERRORS, 0)


def format_counters() -> List[str]:
    """Render every non-zero counter as ``name value`` or ``name{backend=x} value`` lines."""
    lines = [f"{name} {val}" for name, val in sorted(_COUNTERS.items())]
    lines.extend(
        f"{name}{{backend={backend}}} {val}" for (name, backend), val in sorted(_BY_BACKEND.items())
    )
    return lines


def reset() -> None:
    """Reset all in-process counters (for tests)."""
    _COUNTERS.clear()
    _BY_BACKEND.clear()
