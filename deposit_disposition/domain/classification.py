"""Damage classification: which reported conditions may be deducted"""

from typing import Iterable, List, NamedTuple

from deposit_disposition.domain.models import DamageItem


class DamageClassification(NamedTuple):
    deductible: List[DamageItem]
    non_deductible: List[DamageItem]


def is_deductible(item: DamageItem) -> bool:
    """Normal wear OR pre-existing damage excludes an item; cost is irrelevant"""
    return not item.is_normal_wear and not item.is_pre_existing


def classify_damage_items(items: Iterable[DamageItem]) -> DamageClassification:
    """
    Partition damage items, preserving input order within each group.

    The non-deductible group is informational only (shown as "not deducted"
    on the letter) and never contributes to the deduction total.
    """
    deductible: List[DamageItem] = []
    non_deductible: List[DamageItem] = []
    for item in items:
        (deductible if is_deductible(item) else non_deductible).append(item)
    return DamageClassification(deductible=deductible, non_deductible=non_deductible)
