"""Order and assignment status transitions."""

from __future__ import annotations

from farmlink.models.enums import AssignmentStatus, OrderStatus, UserStatus

# ---------------------------------------------------------------------------
# Valid status transitions: current_status -> set of allowed next statuses
# ---------------------------------------------------------------------------

ORDER_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {
        OrderStatus.ALLOCATION,
        OrderStatus.REJECTED,
    },
    OrderStatus.ALLOCATION: {
        OrderStatus.DELIVERED,
    },
}

ASSIGNMENT_TRANSITIONS: dict[AssignmentStatus, set[AssignmentStatus]] = {
    AssignmentStatus.PENDING: {
        AssignmentStatus.DELIVERED,
        AssignmentStatus.FAILED,
    },
}

# Farmers that may receive new assignments
ELIGIBLE_FARMER_STATUSES: frozenset[UserStatus] = frozenset(
    {UserStatus.ACTIVE, UserStatus.PROBATIONARY}
)

DEFAULT_ORDER_LIST_LIMIT = 50


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ORDER_TRANSITIONS.get(current, set())
