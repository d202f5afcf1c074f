"""
Persisted order status machine

Order statuses: draft → submitted → in_progress → completed → delivered
cancelled is reachable from every state before delivered.

The ordering core only ever performs draft → submitted; every later
transition is driven by admin or photographer actions.
"""

from enum import Enum


class OrderStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


VALID_TRANSITIONS = {
    OrderStatus.DRAFT: [OrderStatus.SUBMITTED, OrderStatus.CANCELLED],
    OrderStatus.SUBMITTED: [OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED],
    OrderStatus.IN_PROGRESS: [OrderStatus.COMPLETED, OrderStatus.CANCELLED],
    OrderStatus.COMPLETED: [OrderStatus.DELIVERED, OrderStatus.CANCELLED],
    OrderStatus.DELIVERED: [],  # Terminal state
    OrderStatus.CANCELLED: [],  # Terminal state
}


def can_transition(current_status: str, new_status: str) -> bool:
    """
    Validate if an order status transition is allowed

    Args:
        current_status: Current order status
        new_status: Desired new status

    Returns:
        bool: True if transition is valid, False otherwise
    """
    try:
        current = OrderStatus(current_status)
        target = OrderStatus(new_status)
    except ValueError:
        return False
    return target in VALID_TRANSITIONS[current]


def is_terminal(status: str) -> bool:
    return not VALID_TRANSITIONS[OrderStatus(status)]
