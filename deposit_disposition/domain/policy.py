"""Jurisdiction policy: statutory constants for deposit return"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Tuple

DISCLOSURE_BANK_NAME = "Bank name where deposit was held"
DISCLOSURE_ACCOUNT_LAST4 = "Last 4 digits of account number"

# Disclosures filled from disposition fields; the rest come from the itemization itself
DISCLOSURE_FIELDS: Dict[str, str] = {
    DISCLOSURE_BANK_NAME: "bank_name",
    DISCLOSURE_ACCOUNT_LAST4: "account_last4",
}

NORMAL_WEAR_EXAMPLES = (
    "Minor scuffs on walls",
    "Faded paint from sunlight",
    "Worn carpet in high-traffic areas",
    "Minor nail holes from pictures",
    "Loose door handles from normal use",
)

DEDUCTIBLE_DAMAGE_EXAMPLES = (
    "Holes in walls larger than nail holes",
    "Stains on carpet beyond normal wear",
    "Broken windows or doors",
    "Missing fixtures or appliances",
    "Excessive dirt requiring professional cleaning",
    "Pet damage",
    "Unauthorized alterations",
)


@dataclass(frozen=True)
class JurisdictionPolicy:
    """
    Rules of a "N days, simple interest, itemized deductions" regime.

    Attributes:
        name: Statute or jurisdiction label shown on letters and logs
        return_deadline_days: Days after move-out to send the disposition
        default_interest_rate: Annual simple rate when the lease records none
        days_per_year: Fixed day-count denominator for interest (365, not 365.25)
        deadline_warning_days: Unsent dispositions this close to the deadline are urgent
        interest_notice_days: Deposit anniversaries this close count as interest due soon
        required_disclosures: Items the disposition letter must contain
        normal_wear_examples: Guidance shown when classifying damage (not deductible)
        deductible_damage_examples: Guidance shown when classifying damage (deductible)
    """

    name: str
    return_deadline_days: int
    default_interest_rate: Decimal
    days_per_year: int = 365
    deadline_warning_days: int = 5
    interest_notice_days: int = 30
    required_disclosures: Tuple[str, ...] = (
        DISCLOSURE_BANK_NAME,
        DISCLOSURE_ACCOUNT_LAST4,
        "Itemized list of deductions",
        "Reason for each deduction",
        "Amount of each deduction",
    )
    normal_wear_examples: Tuple[str, ...] = NORMAL_WEAR_EXAMPLES
    deductible_damage_examples: Tuple[str, ...] = DEDUCTIBLE_DAMAGE_EXAMPLES


MINNESOTA = JurisdictionPolicy(
    name="MN 504B.178",
    return_deadline_days=21,
    default_interest_rate=Decimal("0.01"),
)


def policy_from_settings(settings) -> JurisdictionPolicy:
    """Build the active policy from application settings"""
    return JurisdictionPolicy(
        name=settings.jurisdiction_name,
        return_deadline_days=settings.return_deadline_days,
        default_interest_rate=Decimal(settings.default_interest_rate),
        deadline_warning_days=settings.deadline_warning_days,
        interest_notice_days=settings.interest_notice_days,
    )
