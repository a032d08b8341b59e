"""Event type label categories.

The event type mapping is ``{label: category}`` for the labels of the
event type status column.
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class EventCategory(str, Enum):
    BILLABLE = "billable"  # exactly one label
    NON_BILLABLE = "nonBillable"
    TEMPORARY = "temporary"  # exactly one label
    ALL_DAY = "allDay"  # at least one label


LEGACY_BILLABLE_LABEL = "שעתי"
LEGACY_NON_BILLABLE_LABEL = "לא לחיוב"

# Known store labels used for automatic mapping
KNOWN_LABELS: dict[str, EventCategory] = {
    "שעתי": EventCategory.BILLABLE,
    "לא לחיוב": EventCategory.NON_BILLABLE,
    "זמני": EventCategory.TEMPORARY,
    "חופשה": EventCategory.ALL_DAY,
    "מחלה": EventCategory.ALL_DAY,
    "מילואים": EventCategory.ALL_DAY,
}


def category_for(label: str | None, mapping: dict[str, str] | None) -> EventCategory | None:
    """Category of a label, or None when unmapped."""
    if not label or not mapping:
        return None
    try:
        return EventCategory(mapping[label])
    except (KeyError, ValueError):
        return None


def labels_for(category: EventCategory, mapping: dict[str, str] | None) -> list[str]:
    if not mapping:
        return []
    return [label for label, cat in mapping.items() if cat == category.value]


def is_all_day_label(label: str | None, mapping: dict[str, str] | None) -> bool:
    return category_for(label, mapping) == EventCategory.ALL_DAY


def is_temporary_label(label: str | None, mapping: dict[str, str] | None) -> bool:
    return category_for(label, mapping) == EventCategory.TEMPORARY


def timed_event_label(billable: bool, mapping: dict[str, str] | None) -> str:
    """Label to write for a timed event."""
    if billable:
        labels = labels_for(EventCategory.BILLABLE, mapping)
        return labels[0] if labels else LEGACY_BILLABLE_LABEL
    labels = labels_for(EventCategory.NON_BILLABLE, mapping)
    return labels[0] if labels else LEGACY_NON_BILLABLE_LABEL


def validate_event_type_mapping(mapping: dict[str, str] | None) -> list[str]:
    """Return validation errors; an empty list means the mapping is valid."""
    if not mapping:
        return ["Event type mapping is missing or empty"]

    errors = []
    billable = len(labels_for(EventCategory.BILLABLE, mapping))
    if billable == 0:
        errors.append('Exactly one label must be mapped to "billable"')
    elif billable > 1:
        errors.append('Only one label may be mapped to "billable"')

    temporary = len(labels_for(EventCategory.TEMPORARY, mapping))
    if temporary == 0:
        errors.append('Exactly one label must be mapped to "temporary"')
    elif temporary > 1:
        errors.append('Only one label may be mapped to "temporary"')

    if not labels_for(EventCategory.ALL_DAY, mapping):
        errors.append('At least one label must be mapped to "allDay"')
    return errors


def auto_event_type_mapping(labels: list[str]) -> dict[str, str] | None:
    """Map known labels automatically; None if the result is not valid."""
    mapping = {label: KNOWN_LABELS[label].value for label in labels if label in KNOWN_LABELS}
    errors = validate_event_type_mapping(mapping)
    if errors:
        logger.warning(f"Automatic event type mapping failed: {errors}")
        return None
    logger.info(f"Automatic event type mapping matched {len(mapping)}/{len(labels)} labels")
    return mapping
