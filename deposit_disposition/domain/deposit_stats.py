"""Deposit portfolio summary: balances held, interest to date, upcoming anniversaries"""

from datetime import date
from typing import Iterable, Optional

from deposit_disposition.domain.compliance import calculate_deposit_interest
from deposit_disposition.domain.models import DepositStats, LeaseDeposit
from deposit_disposition.domain.policy import MINNESOTA, JurisdictionPolicy
from deposit_disposition.utils.date_utils import days_between


def days_until_interest_anniversary(
    deposit_date: date,
    as_of: date,
    policy: JurisdictionPolicy = MINNESOTA,
) -> Optional[int]:
    """
    Days until the next yearly anniversary of the deposit, or None before the deposit date.

    Anniversaries use the same fixed year as interest: on the anniversary
    itself the next one is a full year away.
    """
    days_held = days_between(deposit_date, as_of)
    if days_held < 0:
        return None
    return policy.days_per_year - (days_held % policy.days_per_year)


def summarize_deposits(
    deposits: Iterable[LeaseDeposit],
    pending_dispositions: int,
    as_of: date,
    policy: JurisdictionPolicy = MINNESOTA,
) -> DepositStats:
    """
    Totals over deposits currently held.

    Interest is accrued from the effective deposit date to `as_of` with the
    lease's rate (policy default when unset). Deposits dated after `as_of`
    count toward the balance but have accrued nothing yet.
    """
    total_held = 0
    total_interest = 0
    count = 0
    due_soon = 0

    for deposit in deposits:
        count += 1
        total_held += deposit.amount_cents

        deposit_date = deposit.effective_paid_date
        remaining = days_until_interest_anniversary(deposit_date, as_of, policy)
        if remaining is None:
            continue

        total_interest += calculate_deposit_interest(
            deposit.amount_cents,
            deposit_date,
            as_of,
            deposit.interest_rate,
            policy,
        )
        if remaining <= policy.interest_notice_days:
            due_soon += 1

    return DepositStats(
        as_of=as_of,
        total_deposits_held_cents=total_held,
        total_interest_accrued_cents=total_interest,
        active_deposits_count=count,
        pending_dispositions=pending_dispositions,
        interest_due_soon=due_soon,
        default_interest_rate=policy.default_interest_rate,
    )
