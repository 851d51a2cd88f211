from __future__ import annotations

from datetime import date
from typing import List, Optional, Union

from ...data.catalog import (
    EQUIPMENT_LIST,
    FARMER_CASES,
    LAND_LISTINGS,
    get_equipment,
    get_farmer_case,
    get_land,
)
from ...domain.donations import (
    DonationForm,
    days_left,
    farmer_share_payload,
    funding_progress,
)
from ...domain.errors import InvalidInputError, NotFoundError
from ...domain.listings import (
    ALL_LOCATIONS,
    ALL_TYPES,
    equipment_share_payload,
    filter_equipment,
    filter_land,
    land_share_payload,
    negotiate_land_price,
    quote_rental,
)
from ...infra.config import get_config
from ...observability.logging_utils import log_event
from ...schemas import (
    DonationReceipt,
    EquipmentListing,
    FarmerCase,
    FarmerCaseView,
    LandListing,
    NegotiationResult,
    RentalQuote,
    SharePayload,
)


def _page_url(path: str) -> str:
    base = get_config().public_base_url or ""
    return f"{base}{path}"


def search_equipment(
    query: Optional[str] = None,
    equipment_type: Optional[str] = ALL_TYPES,
    location: Optional[str] = ALL_LOCATIONS,
) -> List[EquipmentListing]:
    return filter_equipment(EQUIPMENT_LIST, query, equipment_type, location)


def search_land(query: Optional[str] = None, state: Optional[str] = None) -> List[LandListing]:
    return filter_land(LAND_LISTINGS, query, state)


def require_equipment(equipment_id: int) -> EquipmentListing:
    listing = get_equipment(equipment_id)
    if listing is None:
        raise NotFoundError(f"Equipment {equipment_id} not found")
    return listing


def require_land(land_id: int) -> LandListing:
    listing = get_land(land_id)
    if listing is None:
        raise NotFoundError(f"Land listing {land_id} not found")
    return listing


def require_farmer_case(case_id: int) -> FarmerCase:
    case = get_farmer_case(case_id)
    if case is None:
        raise NotFoundError(f"Farmer {case_id} not found")
    return case


def request_rental(equipment_id: int, days: Union[int, str, None]) -> RentalQuote:
    quote = quote_rental(require_equipment(equipment_id), days)
    log_event("rental_quoted", equipment_id=equipment_id, days=quote.days, total=quote.total)
    return quote


def propose_land_price(
    land_id: int, price: Optional[Union[int, float]] = None
) -> NegotiationResult:
    result = negotiate_land_price(require_land(land_id), price)
    log_event(
        "land_proposal",
        land_id=land_id,
        value=result.value,
        direction=result.direction,
    )
    return result


def equipment_share(equipment_id: int) -> SharePayload:
    return equipment_share_payload(
        require_equipment(equipment_id), _page_url("/equipment-lease")
    )


def land_share(land_id: int) -> SharePayload:
    return land_share_payload(require_land(land_id), _page_url("/land-lease"))


def farmer_case_view(case: FarmerCase, today: Optional[date] = None) -> FarmerCaseView:
    return FarmerCaseView(
        case=case,
        progress_percent=funding_progress(case),
        days_left=days_left(case, today),
        share=farmer_share_payload(case, _page_url("/farmer-support")),
    )


def list_farmer_cases(today: Optional[date] = None) -> List[FarmerCaseView]:
    return [farmer_case_view(case, today) for case in FARMER_CASES]


def donate(
    case_id: int, amount: Union[int, float, str], message: str = ""
) -> DonationReceipt:
    form = DonationForm(require_farmer_case(case_id))
    form.enter_amount(str(amount))
    form.message = message
    if form.numeric_amount <= 0:
        raise InvalidInputError("Please enter a donation amount", missing_fields=["amount"])
    receipt = form.donate()
    log_event("donation_acknowledged", farmer_id=case_id, amount=receipt.amount)
    return receipt
