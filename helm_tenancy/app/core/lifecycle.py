"""Release lifecycle state normalization.

The package manager reports a release status either as a string token
(``"deployed"``, ``"pending-upgrade"``, ``"PENDING_INSTALL"``) or, in older
output formats, as a numeric code (``{"code": 1}``). Both are normalized here
into one lower-case, underscore-separated token and then classified into a
``LifecycleState``. Nothing downstream of this module sees raw status values.

Mapping table:

    ==================  ===========  ===========
    token               legacy code  state
    ==================  ===========  ===========
    deployed            1            deployed
    pending_install     6            in_progress
    pending_upgrade     7            in_progress
    pending_rollback    8            in_progress
    unknown             0            failed
    deleted             2            failed
    superseded          3            failed
    failed              4            failed
    deleting            5            failed
    (anything else)                  failed
    ==================  ===========  ===========
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

LEGACY_STATUS_CODES: dict[int, str] = {
    0: "unknown",
    1: "deployed",
    2: "deleted",
    3: "superseded",
    4: "failed",
    5: "deleting",
    6: "pending_install",
    7: "pending_upgrade",
    8: "pending_rollback",
}

IN_PROGRESS_TOKENS = frozenset({"pending_install", "pending_upgrade", "pending_rollback"})


class LifecycleState(str, Enum):
    """Normalized classification of a release's package-manager status."""

    DEPLOYED = "deployed"
    IN_PROGRESS = "in_progress"
    FAILED = "failed"


def normalize_status_token(raw: Any) -> str:
    """Reduce any raw status representation to a canonical token.

    Accepts a string, an integer code, or a mapping carrying ``code`` or
    ``status`` (older JSON output). Unrecognized shapes map to ``unknown``.
    """
    if isinstance(raw, dict):
        raw = raw.get("code", raw.get("status"))

    if isinstance(raw, bool):
        return "unknown"

    if isinstance(raw, int):
        return LEGACY_STATUS_CODES.get(raw, "unknown")

    if isinstance(raw, str):
        token = raw.strip().casefold().replace("-", "_").replace(" ", "_")
        if token.isdigit():
            return LEGACY_STATUS_CODES.get(int(token), "unknown")
        return token or "unknown"

    return "unknown"


def classify(token: str) -> LifecycleState:
    """Classify a normalized token into a lifecycle state."""
    if token == "deployed":
        return LifecycleState.DEPLOYED
    if token in IN_PROGRESS_TOKENS:
        return LifecycleState.IN_PROGRESS
    return LifecycleState.FAILED


@dataclass(frozen=True)
class ReleaseInfo:
    """Status block of a package-manager JSON response.

    Attributes:
        raw_status: Normalized status token (e.g. ``pending_upgrade``)
        description: Free-form description reported by the tool
        state: Lifecycle state derived from ``raw_status``
    """

    raw_status: str
    description: str
    state: LifecycleState

    @classmethod
    def from_response(cls, response: dict[str, Any]) -> ReleaseInfo:
        """Extract and normalize ``info.status`` and ``info.description``."""
        info = response.get("info") or {}
        if not isinstance(info, dict):
            info = {}
        token = normalize_status_token(info.get("status"))
        description = info.get("description") or ""
        return cls(raw_status=token, description=str(description), state=classify(token))
