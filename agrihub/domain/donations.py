from __future__ import annotations

import math
from datetime import date
from typing import Optional

from ..schemas import DonationReceipt, FarmerCase, SharePayload
from .listings import format_inr


PRESET_AMOUNTS = ("1000", "2000", "5000", "10000")
DEFAULT_AMOUNT = PRESET_AMOUNTS[0]


def funding_progress(case: FarmerCase) -> float:
    if case.amount_needed <= 0:
        return 0.0
    return case.amount_raised / case.amount_needed * 100


def days_left(case: FarmerCase, today: Optional[date] = None) -> int:
    today = today or date.today()
    return max(0, (case.deadline - today).days)


def farmer_share_payload(case: FarmerCase, url: str) -> SharePayload:
    return SharePayload(
        title=f"Support {case.name}",
        text=f"Help support {case.name}, a farmer from {case.location}",
        url=url,
    )


class DonationForm:
    """
    Amount picker of the donation dialog.

    Preset buttons write their value into the amount field; typing in the
    field replaces whatever a preset put there.
    """

    def __init__(self, case: FarmerCase) -> None:
        self.case = case
        self.amount = DEFAULT_AMOUNT
        self.message = ""

    @property
    def selected_preset(self) -> Optional[str]:
        return self.amount if self.amount in PRESET_AMOUNTS else None

    def select_preset(self, value: str) -> None:
        if value not in PRESET_AMOUNTS:
            raise ValueError(f"not a preset amount: {value}")
        self.amount = value

    def enter_amount(self, text: str) -> None:
        self.amount = str(text).strip()

    @property
    def numeric_amount(self) -> float:
        try:
            value = float(self.amount)
        except ValueError:
            return 0.0
        return value if math.isfinite(value) else 0.0

    def donate(self) -> DonationReceipt:
        amount = self.numeric_amount
        # nothing is charged; the dialog only thanks the donor
        return DonationReceipt(
            farmer_id=self.case.id,
            amount=amount,
            message=f"Thank you for your generous donation of ₹{format_inr(amount)}!",
        )
