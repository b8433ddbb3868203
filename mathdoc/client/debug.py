from dataclasses import dataclass, field
from typing import Any

_VISIBLE_SUFFIX = 4


def mask_secret(secret: str | None) -> str:
    """Mask a credential, keeping only its last four characters."""
    if not secret or not isinstance(secret, str):
        return "*" * 12
    if len(secret) <= _VISIBLE_SUFFIX:
        return "*" * _VISIBLE_SUFFIX
    return "*" * (len(secret) - _VISIBLE_SUFFIX) + secret[-_VISIBLE_SUFFIX:]


@dataclass(frozen=True)
class DebugSnapshot:
    """Redacted copy of the last request/response pair."""

    timestamp: str
    operation: str
    endpoint: str
    method: str
    request: dict[str, Any] = field(default_factory=dict)
    response: dict[str, Any] = field(default_factory=dict)
    timing: dict[str, Any] = field(default_factory=dict)
