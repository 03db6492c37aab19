"""Disposition calculator - deposit + interest - deductions = refund"""

from typing import Iterable

from deposit_disposition.domain.classification import classify_damage_items
from deposit_disposition.domain.exceptions import DispositionValidationError
from deposit_disposition.domain.models import DamageItem, DispositionTotals, ItemizedDeduction


def calculate_disposition(
    original_deposit_cents: int,
    interest_accrued_cents: int,
    damage_items: Iterable[DamageItem],
) -> DispositionTotals:
    """
    Compute deduction total, refund and itemization from current damage items.

    Requirements:
    - Only deductible items (not normal wear, not pre-existing) are summed
    - Refund never goes below zero; a shortfall is reported by the caller,
      not modelled here as a negative balance
    - Itemization keeps damage-item order so repeated runs are identical

    Example:
        $1000 deposit + $10 interest, deductible $200, normal-wear $50
        -> deductions $200, refund $810, one itemized line
    """
    if original_deposit_cents < 0:
        raise DispositionValidationError(f"Deposit amount cannot be negative: {original_deposit_cents}")
    if interest_accrued_cents < 0:
        raise DispositionValidationError(f"Accrued interest cannot be negative: {interest_accrued_cents}")

    classification = classify_damage_items(damage_items)

    itemized = []
    for item in classification.deductible:
        if item.repair_cost_cents < 0:
            raise DispositionValidationError(
                f"Repair cost cannot be negative: {item.repair_cost_cents} ({item.description})"
            )
        itemized.append(
            ItemizedDeduction(
                description=item.description,
                location=item.location,
                amount_cents=item.repair_cost_cents,
                notes=item.notes,
            )
        )

    # Integer cents: the sum is exact, no rounding step needed
    total_deductions = sum(line.amount_cents for line in itemized)
    refund = max(0, original_deposit_cents + interest_accrued_cents - total_deductions)

    return DispositionTotals(
        total_deductions_cents=total_deductions,
        refund_amount_cents=refund,
        itemized_deductions=itemized,
    )
