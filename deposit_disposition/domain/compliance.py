"""Deadline and compliance tracking for deposit dispositions"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from deposit_disposition.domain.exceptions import DispositionValidationError
from deposit_disposition.domain.models import ComplianceStatus, Disposition
from deposit_disposition.domain.policy import DISCLOSURE_FIELDS, MINNESOTA, JurisdictionPolicy
from deposit_disposition.utils.date_utils import add_days, days_between
from deposit_disposition.utils.money import round_to_cents


def calculate_deadline_date(move_out_date: date, policy: JurisdictionPolicy = MINNESOTA) -> date:
    """Statutory deadline: move-out + return_deadline_days (2025-01-10 -> 2025-01-31 under MN)"""
    return add_days(move_out_date, policy.return_deadline_days)


def calculate_deposit_interest(
    amount_cents: int,
    deposit_date: date,
    move_out_date: date,
    interest_rate: Optional[Decimal] = None,
    policy: JurisdictionPolicy = MINNESOTA,
) -> int:
    """
    Simple (non-compounding) interest on the deposit, in cents.

    interest = amount * rate * days_held / days_per_year, rounded once.

    Example:
        $1200 at 1% held 182 days -> 120000 * 0.01 * 182 / 365 = 598.36 -> 598 cents

    Raises:
        DispositionValidationError: negative amount or rate, or move-out before deposit
    """
    rate = policy.default_interest_rate if interest_rate is None else Decimal(interest_rate)
    if amount_cents < 0:
        raise DispositionValidationError(f"Deposit amount cannot be negative: {amount_cents}")
    if rate < 0:
        raise DispositionValidationError(f"Interest rate cannot be negative: {rate}")

    days_held = days_between(deposit_date, move_out_date)
    if days_held < 0:
        raise DispositionValidationError(
            f"Move-out date {move_out_date.isoformat()} is before deposit date {deposit_date.isoformat()}"
        )

    interest = Decimal(amount_cents) * rate * Decimal(days_held) / Decimal(policy.days_per_year)
    return round_to_cents(interest)


def is_overdue(deadline_date: date, sent_date: Optional[date], today: date) -> bool:
    """Unsent past the deadline. Any send, however late, clears this for good."""
    return sent_date is None and today > deadline_date


def days_until_deadline(deadline_date: date, today: date) -> int:
    """Days remaining; negative values are days overdue"""
    return days_between(today, deadline_date)


def missing_disclosures(disposition: Disposition, policy: JurisdictionPolicy = MINNESOTA) -> List[str]:
    """Required letter disclosures, in policy order, that the disposition cannot fill in yet"""
    return [
        disclosure
        for disclosure in policy.required_disclosures
        if disclosure in DISCLOSURE_FIELDS and not getattr(disposition, DISCLOSURE_FIELDS[disclosure])
    ]


def assess_compliance(
    disposition: Disposition,
    today: date,
    policy: JurisdictionPolicy = MINNESOTA,
) -> ComplianceStatus:
    """Snapshot of deadline state and letter readiness; never mutates the disposition"""
    remaining = days_until_deadline(disposition.deadline_date, today)
    overdue = is_overdue(disposition.deadline_date, disposition.sent_date, today)
    sent = disposition.sent_date is not None
    available = disposition.original_deposit_cents + disposition.interest_accrued_cents

    return ComplianceStatus(
        deadline_date=disposition.deadline_date,
        days_until_deadline=remaining,
        is_overdue=overdue,
        is_urgent=not sent and not overdue and remaining <= policy.deadline_warning_days,
        is_sent=sent,
        missing_disclosures=[] if sent else missing_disclosures(disposition, policy),
        deductions_exceed_deposit=disposition.total_deductions_cents > available,
    )
