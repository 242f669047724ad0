from __future__ import annotations

from buildhive.domain.checkout_fsm import (
    ALLOWED_TRANSITIONS,
    CheckoutState,
    validate_checkout_transition,
)


def test_cod_and_card_paths_allowed() -> None:
    assert validate_checkout_transition(CheckoutState.FORM, CheckoutState.SUBMITTING).allowed
    assert validate_checkout_transition(CheckoutState.SUBMITTING, CheckoutState.PLACED).allowed
    assert validate_checkout_transition(
        CheckoutState.SUBMITTING, CheckoutState.AWAITING_CARD_CONFIRMATION
    ).allowed
    assert validate_checkout_transition(
        CheckoutState.AWAITING_CARD_CONFIRMATION, CheckoutState.PLACED
    ).allowed


def test_failures_return_to_form() -> None:
    assert validate_checkout_transition(CheckoutState.SUBMITTING, CheckoutState.FORM).allowed
    assert validate_checkout_transition(
        CheckoutState.AWAITING_CARD_CONFIRMATION, CheckoutState.FORM
    ).allowed


def test_form_cannot_jump_to_placed() -> None:
    result = validate_checkout_transition(CheckoutState.FORM, CheckoutState.PLACED)
    assert not result.allowed
    assert result.reason == "Transition 'form -> placed' is not allowed."


def test_placed_only_resets_to_form() -> None:
    assert ALLOWED_TRANSITIONS[CheckoutState.PLACED] == frozenset({CheckoutState.FORM})
    assert not validate_checkout_transition(CheckoutState.PLACED, CheckoutState.SUBMITTING).allowed


def test_unknown_states_rejected() -> None:
    assert not validate_checkout_transition(CheckoutState.FORM, "shipped").allowed
    assert not validate_checkout_transition("draft", CheckoutState.FORM).allowed
