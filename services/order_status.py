from core.timeutils import utcnow

PENDING = "pending"
CONFIRMED = "confirmed"
DELIVERED = "delivered"
CANCELLED = "cancelled"

STATUSES = (PENDING, CONFIRMED, DELIVERED, CANCELLED)
ACTIVE_STATUSES = (PENDING, CONFIRMED)

ALLOWED_TRANSITIONS = {
    PENDING: {CONFIRMED, CANCELLED},
    CONFIRMED: {DELIVERED, CANCELLED},
    DELIVERED: set(),
    CANCELLED: set(),
}


class InvalidStatus(ValueError):
    def __init__(self, status):
        super().__init__(f"Invalid status: {status}")
        self.status = status


class InvalidTransition(ValueError):
    def __init__(self, current, target):
        super().__init__(f"Cannot change order status from {current} to {target}")
        self.current = current
        self.target = target


def can_transition(current, target):
    return target in ALLOWED_TRANSITIONS.get(current, set())


def next_statuses(current):
    return sorted(ALLOWED_TRANSITIONS.get(current, set()))


def apply_transition(order, target, now=None):
    """Move ``order`` to ``target`` in place.

    Raises InvalidStatus for unknown names and InvalidTransition for edges
    outside the lifecycle. Delivery stamps ``completed_date``. The caller
    commits; nothing here touches the session.
    """
    if target not in STATUSES:
        raise InvalidStatus(target)
    if not can_transition(order.status, target):
        raise InvalidTransition(order.status, target)

    order.status = target
    if target == DELIVERED:
        order.completed_date = now or utcnow()
    return order
