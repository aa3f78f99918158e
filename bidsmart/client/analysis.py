"""Analysis status shown on the results screen."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Literal, Optional, Sequence

from bidsmart.core.signing import parse_timestamp

AnalysisStatus = Literal["processing", "partial", "complete", "failed", "timeout"]

ANALYSIS_TIMEOUT = timedelta(minutes=10)

SCOPE_FIELDS = (
    "scope_summary",
    "inclusions",
    "exclusions",
    "scope_permit_included",
    "scope_disposal_included",
    "scope_electrical_included",
    "scope_ductwork_included",
    "scope_thermostat_included",
    "scope_manual_j_included",
    "scope_commissioning_included",
    "scope_air_handler_included",
    "scope_line_set_included",
    "scope_disconnect_included",
    "scope_pad_included",
    "scope_drain_line_included",
)


def bid_has_scope(bid: Dict[str, Any]) -> bool:
    """True once the extraction filled in any scope of work detail."""
    return any(bid.get(name) not in (None, "", []) for name in SCOPE_FIELDS)


def _as_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str):
        return parse_timestamp(value)
    return None


def derive_analysis_status(
    project: Optional[Dict[str, Any]],
    bids: Sequence[Dict[str, Any]],
    now: Optional[datetime] = None,
) -> AnalysisStatus:
    """Summarize where a project's analysis stands.

    Args:
        project: Project row, or None while nothing is loaded
        bids: The project's bid rows
        now: Reference time, defaults to the current UTC time
    """
    if not project:
        return "processing"

    status = project.get("status")
    if status in ("comparing", "completed"):
        return "complete"
    if status == "cancelled":
        return "failed"

    with_scope = sum(1 for bid in bids if bid_has_scope(bid))
    if 0 < with_scope < len(bids):
        return "partial"

    queued_at = _as_datetime(project.get("analysis_queued_at"))
    if queued_at is not None and status == "analyzing":
        reference = now or datetime.now(timezone.utc)
        if reference - queued_at > ANALYSIS_TIMEOUT:
            return "timeout"

    return "processing"
