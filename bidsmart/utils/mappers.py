"""Value mappers for MindPal extraction results.

These normalize loosely-typed values from the extraction payload into the
enumerations stored on bid rows.
"""

from typing import Any, Optional, Union

CONFIDENCE_LEVELS = ("high", "medium", "low")
MANUAL_CONFIDENCE = "manual"

LINE_ITEM_TYPES = frozenset(
    {
        "equipment",
        "labor",
        "materials",
        "permit",
        "disposal",
        "electrical",
        "ductwork",
        "thermostat",
        "rebate_processing",
        "warranty",
    }
)

EQUIPMENT_STAGES = {
    "single": 1,
    "two": 2,
    "variable": 99,
}


def map_confidence_to_level(confidence: Union[int, float, str, None]) -> str:
    """Bucket a confidence score into high/medium/low/manual.

    Numeric scores may be given either on a 0-1 or a 0-100 scale; anything
    above 1 is treated as a percentage. Enum strings pass through unchanged.

    Args:
        confidence: Raw confidence value from the payload

    Returns:
        One of ``high``, ``medium``, ``low`` or ``manual``
    """
    if confidence is None or isinstance(confidence, bool):
        return MANUAL_CONFIDENCE

    if isinstance(confidence, str):
        level = confidence.strip().lower()
        return level if level in CONFIDENCE_LEVELS else MANUAL_CONFIDENCE

    if confidence == 0:
        return MANUAL_CONFIDENCE

    normalized = confidence / 100 if confidence > 1 else confidence

    if normalized >= 0.8:
        return "high"
    if normalized >= 0.5:
        return "medium"
    return "low"


def map_line_item_type(item_type: Optional[str]) -> str:
    """Map a free-form line item type onto a known category, else ``other``."""
    if not item_type:
        return "other"
    normalized = item_type.strip().lower()
    return normalized if normalized in LINE_ITEM_TYPES else "other"


def map_equipment_stages(stages: Any) -> Optional[int]:
    """Translate ``single``/``two``/``variable`` into a stage count."""
    if not isinstance(stages, str):
        return None
    return EQUIPMENT_STAGES.get(stages.strip().lower())
