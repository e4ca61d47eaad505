"""
Order status transition table tests
"""
import pytest

from storefront.buisness.core.errors import AlreadyCancelledError, IllegalTransitionError, ValidationError
from storefront.buisness.ordering.state_machine import OrderStateMachine as SM


@pytest.mark.parametrize('from_status,to_status', [
    (SM.PENDING, SM.CONFIRMED),
    (SM.CONFIRMED, SM.IN_PROGRESS),
    (SM.IN_PROGRESS, SM.DELIVERED),
])
def test_forward_steps_are_allowed(from_status, to_status):
    assert SM.can_transition(from_status, to_status)
    SM.validate_transition(from_status, to_status)


@pytest.mark.parametrize('from_status,to_status', [
    (SM.PENDING, SM.DELIVERED),
    (SM.PENDING, SM.IN_PROGRESS),
    (SM.CONFIRMED, SM.PENDING),
    (SM.DELIVERED, SM.IN_PROGRESS),
    (SM.PENDING, SM.PENDING),
    (SM.PENDING, SM.CANCELLED),
    (SM.CANCELLED, SM.PENDING),
])
def test_other_advances_are_rejected(from_status, to_status):
    assert not SM.can_transition(from_status, to_status)
    with pytest.raises(IllegalTransitionError) as excinfo:
        SM.validate_transition(from_status, to_status, order_ref='PED1')

    assert excinfo.value.from_status == from_status
    assert excinfo.value.to_status == to_status
    assert 'PED1' in excinfo.value.message


@pytest.mark.parametrize('status', [SM.PENDING, SM.CONFIRMED])
def test_cancel_allowed_before_work_starts(status):
    SM.validate_cancel(status)


@pytest.mark.parametrize('status', [SM.IN_PROGRESS, SM.DELIVERED])
def test_cancel_rejected_once_in_progress(status):
    with pytest.raises(IllegalTransitionError) as excinfo:
        SM.validate_cancel(status)
    assert not isinstance(excinfo.value, AlreadyCancelledError)


@pytest.mark.parametrize('status', [SM.CONFIRMED, SM.DELIVERED])
def test_return_allowed_after_confirmation(status):
    SM.validate_return(status)


@pytest.mark.parametrize('status', [SM.PENDING, SM.IN_PROGRESS])
def test_return_rejected_otherwise(status):
    with pytest.raises(IllegalTransitionError):
        SM.validate_return(status)


def test_cancelled_is_terminal():
    with pytest.raises(AlreadyCancelledError):
        SM.validate_cancel(SM.CANCELLED)
    with pytest.raises(AlreadyCancelledError):
        SM.validate_return(SM.CANCELLED)

    assert SM.get_allowed_transitions(SM.CANCELLED) == set()
    assert SM.get_available_actions(SM.CANCELLED) == {'advance': False, 'cancel': False, 'return': False}


def test_available_actions_for_delivered():
    assert SM.get_available_actions(SM.DELIVERED) == {'advance': False, 'cancel': False, 'return': True}


@pytest.mark.parametrize('raw,expected', [
    ('Confirmed', SM.CONFIRMED),
    ('confirmed', SM.CONFIRMED),
    ('in_progress', SM.IN_PROGRESS),
    ('In Progress', SM.IN_PROGRESS),
    ('DELIVERED', SM.DELIVERED),
])
def test_parse_status(raw, expected):
    assert SM.parse_status(raw) == expected


@pytest.mark.parametrize('raw', ['Shipped', '', None, 3])
def test_parse_status_rejects_unknown(raw):
    with pytest.raises(ValidationError):
        SM.parse_status(raw)
