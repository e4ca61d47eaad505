"""
State machine for the order status lifecycle

Encodes valid transitions. Keeps "what is allowed" separate from
"how persistence occurs" (see OrderLifecycleManager).
"""

from typing import Dict, Optional, Set

from storefront.buisness.core.errors import (
    AlreadyCancelledError,
    IllegalTransitionError,
    ValidationError,
)


class OrderStateMachine:
    """
    State machine for Order.status transitions.

    Ordinary progress only moves forward one step at a time:
    Pending → Confirmed → InProgress → Delivered.

    Cancelled is reached only through cancel (from Pending or Confirmed) or
    return (from Confirmed or Delivered). Returned orders are recorded as
    Cancelled too; there is no separate Returned status.
    """

    PENDING = 'Pending'
    CONFIRMED = 'Confirmed'
    IN_PROGRESS = 'InProgress'
    DELIVERED = 'Delivered'
    CANCELLED = 'Cancelled'

    ALL_STATUSES = (PENDING, CONFIRMED, IN_PROGRESS, DELIVERED, CANCELLED)

    # Initial state for new orders
    INITIAL_STATE = PENDING

    # No transition of any kind leaves a terminal state
    TERMINAL_STATES = {CANCELLED}

    # Valid advance transitions: from_status -> set of allowed to_status values
    TRANSITIONS: Dict[str, Set[str]] = {
        PENDING: {CONFIRMED},
        CONFIRMED: {IN_PROGRESS},
        IN_PROGRESS: {DELIVERED},
        # DELIVERED only leaves via return; CANCELLED is terminal
    }

    CANCELLABLE_STATES = {PENDING, CONFIRMED}
    RETURNABLE_STATES = {CONFIRMED, DELIVERED}

    @classmethod
    def parse_status(cls, value) -> str:
        """
        Normalize a requested status name.

        Accepts the canonical names and case/spacing variants such as
        ``in_progress`` or ``In Progress``.

        Raises:
            ValidationError: Unknown status
        """
        if isinstance(value, str):
            key = value.replace('_', '').replace(' ', '').replace('-', '').lower()
            for status in cls.ALL_STATUSES:
                if status.lower() == key:
                    return status
        raise ValidationError(
            f"Unknown order status {value!r}; expected one of {', '.join(cls.ALL_STATUSES)}",
            status=value,
        )

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """
        Check if an advance transition is valid.

        Staying in the same status is not a transition and is rejected.
        """
        if from_status in cls.TERMINAL_STATES:
            return False
        return to_status in cls.TRANSITIONS.get(from_status, set())

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str, order_ref=None) -> None:
        """
        Validate an advance transition and raise if invalid.

        Raises:
            IllegalTransitionError: If transition is not allowed
        """
        if not cls.can_transition(from_status, to_status):
            raise IllegalTransitionError(order_ref, from_status, to_status, operation='advance')

    @classmethod
    def validate_cancel(cls, from_status: str, order_ref=None) -> None:
        cls._validate_exit(from_status, cls.CANCELLABLE_STATES, 'cancel', order_ref)

    @classmethod
    def validate_return(cls, from_status: str, order_ref=None) -> None:
        cls._validate_exit(from_status, cls.RETURNABLE_STATES, 'return', order_ref)

    @classmethod
    def _validate_exit(cls, from_status: str, allowed: Set[str], operation: str, order_ref: Optional[object]) -> None:
        if from_status == cls.CANCELLED:
            raise AlreadyCancelledError(order_ref, from_status, cls.CANCELLED, operation=operation)
        if from_status not in allowed:
            raise IllegalTransitionError(order_ref, from_status, cls.CANCELLED, operation=operation)

    @classmethod
    def get_allowed_transitions(cls, from_status: str) -> Set[str]:
        """Get set of allowed advance targets from current status"""
        if from_status in cls.TERMINAL_STATES:
            return set()
        return set(cls.TRANSITIONS.get(from_status, set()))

    @classmethod
    def get_available_actions(cls, from_status: str) -> Dict[str, bool]:
        """Which lifecycle operations are currently possible"""
        return {
            'advance': bool(cls.get_allowed_transitions(from_status)),
            'cancel': from_status in cls.CANCELLABLE_STATES,
            'return': from_status in cls.RETURNABLE_STATES,
        }
