"""Checkout state transition rules (single source of truth)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping


class CheckoutState:
    FORM = "form"
    SUBMITTING = "submitting"
    AWAITING_CARD_CONFIRMATION = "awaiting_card_confirmation"
    PLACED = "placed"


ALLOWED_TRANSITIONS: Mapping[str, frozenset[str]] = {
    CheckoutState.FORM: frozenset({CheckoutState.SUBMITTING}),
    CheckoutState.SUBMITTING: frozenset(
        {
            CheckoutState.PLACED,
            CheckoutState.AWAITING_CARD_CONFIRMATION,
            CheckoutState.FORM,
        }
    ),
    CheckoutState.AWAITING_CARD_CONFIRMATION: frozenset(
        {
            CheckoutState.PLACED,
            CheckoutState.FORM,
        }
    ),
    # A placed checkout only goes back to a fresh form for the next purchase
    CheckoutState.PLACED: frozenset({CheckoutState.FORM}),
}

TERMINAL_STATES = frozenset({CheckoutState.PLACED})


@dataclass(frozen=True, slots=True)
class TransitionValidationResult:
    allowed: bool
    reason: str | None = None


def validate_checkout_transition(current: str, target: str) -> TransitionValidationResult:
    if target not in ALLOWED_TRANSITIONS:
        return TransitionValidationResult(False, f"Unsupported checkout state: {target}")
    if current not in ALLOWED_TRANSITIONS:
        return TransitionValidationResult(False, f"Unsupported current state: {current}")
    if target not in ALLOWED_TRANSITIONS[current]:
        return TransitionValidationResult(False, f"Transition '{current} -> {target}' is not allowed.")
    return TransitionValidationResult(True)
