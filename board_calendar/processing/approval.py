"""Manager approval of reported events.

The approval mapping is ``{label index: category}`` for the labels of
the approval status column.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from board_calendar.exceptions import StoreError
from board_calendar.models.event import ApprovalState, Event
from board_calendar.models.settings import CalendarSettings

if TYPE_CHECKING:
    from board_calendar.storage.store_client import StoreClient

logger = logging.getLogger(__name__)


class ApprovalCategory(str, Enum):
    PENDING = "pending"
    APPROVED_BILLABLE = "approved_billable"
    APPROVED_UNBILLABLE = "approved_unbillable"
    REJECTED = "rejected"


LEGACY_APPROVED = "approved"

KNOWN_APPROVAL_LABELS: dict[str, ApprovalCategory] = {
    "ממתין": ApprovalCategory.PENDING,
    "ממתין לאישור": ApprovalCategory.PENDING,
    "pending": ApprovalCategory.PENDING,
    "מאושר": ApprovalCategory.APPROVED_BILLABLE,
    "מאושר - לחיוב": ApprovalCategory.APPROVED_BILLABLE,
    "approved": ApprovalCategory.APPROVED_BILLABLE,
    "מאושר - לא לחיוב": ApprovalCategory.APPROVED_UNBILLABLE,
    "לא מאושר": ApprovalCategory.REJECTED,
    "נדחה": ApprovalCategory.REJECTED,
    "rejected": ApprovalCategory.REJECTED,
}

CATEGORY_STATES = {
    ApprovalCategory.PENDING: ApprovalState.PENDING,
    ApprovalCategory.APPROVED_BILLABLE: ApprovalState.APPROVED,
    ApprovalCategory.APPROVED_UNBILLABLE: ApprovalState.APPROVED,
    ApprovalCategory.REJECTED: ApprovalState.REJECTED,
}


def approval_category(index: int | str | None, mapping: dict[str, str] | None) -> ApprovalCategory | None:
    if index is None or not mapping:
        return None
    try:
        return ApprovalCategory(mapping[str(index)])
    except (KeyError, ValueError):
        return None


def index_for(category: ApprovalCategory, mapping: dict[str, str] | None) -> str | None:
    """Label index mapped to a category."""
    for index, cat in (mapping or {}).items():
        if cat == category.value:
            return index
    return None


def resolve_approval_state(index: int | str | None, mapping: dict[str, str] | None) -> ApprovalState:
    """Approval state of a label index; unmapped labels have no state."""
    category = approval_category(index, mapping)
    return CATEGORY_STATES[category] if category else ApprovalState.NONE


def validate_approval_mapping(mapping: dict[str, str] | None) -> list[str]:
    """Every category needs exactly one label."""
    if not mapping:
        return ["Approval status mapping is missing or empty"]
    errors = []
    for category in ApprovalCategory:
        count = sum(1 for cat in mapping.values() if cat == category.value)
        if count == 0:
            errors.append(f'Exactly one label must be mapped to "{category.value}"')
        elif count > 1:
            errors.append(f'Only one label may be mapped to "{category.value}"')
    return errors


def auto_approval_mapping(labels: dict[str, str]) -> dict[str, str] | None:
    """Map known labels automatically from ``{index: label}``.

    The first label seen for a category wins. Returns None if the
    resulting mapping is not valid.
    """
    mapping: dict[str, str] = {}
    for index, label in labels.items():
        category = KNOWN_APPROVAL_LABELS.get(label)
        if category is None or category.value in mapping.values():
            continue
        mapping[str(index)] = category.value

    errors = validate_approval_mapping(mapping)
    if errors:
        logger.warning(f"Automatic approval mapping failed: {errors}")
        return None
    return mapping


def migrate_approval_mapping(mapping: dict[str, str] | None) -> dict[str, str] | None:
    """Rewrite legacy ``approved`` entries to ``approved_billable``.

    Returns the new mapping, or None when nothing changed.
    """
    if not mapping or LEGACY_APPROVED not in mapping.values():
        return None
    migrated = {
        index: ApprovalCategory.APPROVED_BILLABLE.value if cat == LEGACY_APPROVED else cat
        for index, cat in mapping.items()
    }
    logger.info("Migrated legacy approval mapping entries to approved_billable")
    return migrated


@dataclass
class BatchResult:
    """Outcome counts of a batch approval."""

    succeeded: int = 0
    failed: int = 0


class ApprovalService:
    """Approve or reject reported events on the reporting board."""

    def __init__(
        self,
        client: "StoreClient",
        settings: CalendarSettings,
        board_id: str | None,
        user_id: str | None = None,
        batch_size: int = 5,
    ):
        self.client = client
        self.settings = settings
        self.board_id = board_id
        self.user_id = str(user_id) if user_id is not None else ""
        self.batch_size = batch_size

    @property
    def enabled(self) -> bool:
        return self.settings.approval_enabled

    @property
    def is_manager(self) -> bool:
        return self.enabled and self.user_id in self.settings.approved_manager_ids

    async def update_status(self, event: Event, index: str | int | None) -> bool:
        """Write a label index to the approval column; StoreError propagates."""
        column_id = self.settings.approval_status_column_id
        if not self.board_id or not column_id or index is None:
            return False
        await self.client.update_item_column_values(
            self.board_id, event.record_id, {column_id: {"index": int(index)}}
        )
        return True

    async def approve(self, event: Event, billable: bool = True) -> bool:
        category = ApprovalCategory.APPROVED_BILLABLE if billable else ApprovalCategory.APPROVED_UNBILLABLE
        index = index_for(category, self.settings.approval_status_mapping)
        if index is None:
            logger.error(f"No label is mapped to {category.value}")
            return False
        return await self.update_status(event, index)

    async def reject(self, event: Event) -> bool:
        index = index_for(ApprovalCategory.REJECTED, self.settings.approval_status_mapping)
        if index is None:
            logger.error("No label is mapped to rejected")
            return False
        return await self.update_status(event, index)

    async def approve_many(self, events: list[Event], billable: bool = True) -> BatchResult:
        """Approve events in batches, counting successes and failures."""
        result = BatchResult()
        for i in range(0, len(events), self.batch_size):
            batch = events[i : i + self.batch_size]
            outcomes = await asyncio.gather(
                *(self.approve(event, billable) for event in batch), return_exceptions=True
            )
            for outcome in outcomes:
                if outcome is True:
                    result.succeeded += 1
                else:
                    if isinstance(outcome, StoreError):
                        logger.error(f"Approval update failed: {outcome}")
                    elif isinstance(outcome, BaseException):
                        raise outcome
                    result.failed += 1
        logger.info(f"Batch approval: {result.succeeded} succeeded, {result.failed} failed")
        return result

    async def approve_all_pending(self, events: list[Event], billable: bool = True) -> BatchResult:
        pending = [
            e
            for e in events
            if e.approval_state == ApprovalState.PENDING and not e.is_synthetic
        ]
        if not pending:
            return BatchResult()
        return await self.approve_many(pending, billable)
