"""Disposition state machine"""

from typing import Dict, FrozenSet

from deposit_disposition.domain.exceptions import InvalidTransitionError
from deposit_disposition.domain.models import DispositionStatus

S = DispositionStatus

# DRAFT -> PENDING_REVIEW -> SENT -> {ACKNOWLEDGED, DISPUTED}
ALLOWED_TRANSITIONS: Dict[DispositionStatus, FrozenSet[DispositionStatus]] = {
    S.DRAFT: frozenset({S.PENDING_REVIEW, S.SENT}),
    S.PENDING_REVIEW: frozenset({S.DRAFT, S.SENT}),
    S.SENT: frozenset({S.ACKNOWLEDGED, S.DISPUTED}),
    S.DISPUTED: frozenset({S.ACKNOWLEDGED}),
    S.ACKNOWLEDGED: frozenset(),
}

# Damage items may change only before the letter goes out
EDITABLE_STATUSES = frozenset({S.DRAFT, S.PENDING_REVIEW})

TERMINAL_STATUSES = frozenset({S.ACKNOWLEDGED, S.DISPUTED})


def can_transition(current: DispositionStatus, target: DispositionStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[DispositionStatus(current)]


def ensure_transition(
    current: DispositionStatus,
    target: DispositionStatus,
    action: str,
    strict: bool = True,
) -> None:
    """
    Raise InvalidTransitionError when `action` would move current -> target illegally.

    With strict=False every transition is accepted, which reproduces the
    permissive behaviour (re-send, refund before send) some deployments rely on.
    """
    if strict and not can_transition(current, target):
        raise InvalidTransitionError(DispositionStatus(current).value, action)


def ensure_editable(current: DispositionStatus, action: str, strict: bool = True) -> None:
    """Damage-item changes are limited to DRAFT and PENDING_REVIEW"""
    if strict and DispositionStatus(current) not in EDITABLE_STATUSES:
        raise InvalidTransitionError(DispositionStatus(current).value, action)


def ensure_recalculable(current: DispositionStatus, strict: bool = True) -> None:
    """Recalculation is allowed in any non-terminal status"""
    if strict and DispositionStatus(current) in TERMINAL_STATUSES:
        raise InvalidTransitionError(DispositionStatus(current).value, "recalculate")
