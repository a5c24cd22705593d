"""ORM-level guard that makes confirmed delivery assignments read-only.

An assignment whose stored status is DELIVERED or FAILED may not be updated
or deleted through the ORM. The confirming flush itself (PENDING to a final
status) is allowed because the stored value it replaces is still PENDING.
Services check the status first and raise a friendly error; these listeners
catch anything that slips past them.
"""

from __future__ import annotations

import logging

from sqlalchemy import event, inspect
from sqlalchemy.orm.attributes import get_history

from farmlink.exceptions import AssignmentImmutableError
from farmlink.models.delivery_assignment import DeliveryAssignment
from farmlink.models.enums import AssignmentStatus

logger = logging.getLogger(__name__)

FINAL_ASSIGNMENT_STATUSES = frozenset({AssignmentStatus.DELIVERED, AssignmentStatus.FAILED})

# Bookkeeping columns that may change on any flush
_ALWAYS_MUTABLE = frozenset({"updated_at"})


def _stored_status(target: DeliveryAssignment) -> AssignmentStatus | None:
    """Status as last loaded from (or flushed to) the database."""
    history = get_history(target, "status")
    if history.deleted:
        return history.deleted[0]
    if history.unchanged:
        return history.unchanged[0]
    return None


def _check_assignment_update(mapper, connection, target: DeliveryAssignment) -> None:
    if _stored_status(target) not in FINAL_ASSIGNMENT_STATUSES:
        return

    changed = [
        attr.key
        for attr in inspect(target).attrs
        if attr.key not in _ALWAYS_MUTABLE and attr.history.has_changes()
    ]
    if changed:
        logger.warning(
            "Blocked update of confirmed assignment %s (fields: %s)", target.id, changed
        )
        raise AssignmentImmutableError(
            f"Assignment {target.id} is {target.status.value} and can no longer be modified",
            details=[{"field": key, "message": "immutable after confirmation"} for key in changed],
        )


def _check_assignment_delete(mapper, connection, target: DeliveryAssignment) -> None:
    status = _stored_status(target)
    if status in FINAL_ASSIGNMENT_STATUSES:
        logger.warning("Blocked delete of confirmed assignment %s", target.id)
        raise AssignmentImmutableError(
            f"Assignment {target.id} is {status.value} and cannot be deleted"
        )


def register_immutability_listeners() -> None:
    """Attach the guards to the DeliveryAssignment mapper. Safe to call repeatedly."""
    if not event.contains(DeliveryAssignment, "before_update", _check_assignment_update):
        event.listen(DeliveryAssignment, "before_update", _check_assignment_update)
    if not event.contains(DeliveryAssignment, "before_delete", _check_assignment_delete):
        event.listen(DeliveryAssignment, "before_delete", _check_assignment_delete)
