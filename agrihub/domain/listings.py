"""Filtering and pricing rules for the equipment and land marketplaces."""

from __future__ import annotations

import math
from typing import Iterable, List, Optional, Union

from ..schemas import (
    EquipmentListing,
    LandListing,
    NegotiationResult,
    RentalQuote,
    SharePayload,
)


ALL_TYPES = "All Types"
ALL_LOCATIONS = "All Locations"
NEGOTIATION_DISCOUNT = 0.85
NEGOTIATION_MARKUP = 1.15


def format_inr(amount: Union[int, float]) -> str:
    """Format a rupee amount with Indian digit grouping, e.g. 1234567 -> 12,34,567."""
    negative = amount < 0
    amount = round(abs(amount), 2)
    whole = int(amount)
    fraction = round(amount - whole, 2)
    digits = str(whole)
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])
    if fraction:
        digits += f"{fraction:.2f}"[1:]
    return f"-{digits}" if negative else digits


def _matches_query(query: Optional[str], *fields: str) -> bool:
    if not query:
        return True
    needle = query.lower()
    return any(needle in field.lower() for field in fields)


def filter_equipment(
    items: Iterable[EquipmentListing],
    query: Optional[str] = None,
    equipment_type: Optional[str] = ALL_TYPES,
    location: Optional[str] = ALL_LOCATIONS,
) -> List[EquipmentListing]:
    results = []
    for item in items:
        if not _matches_query(query, item.name, item.type):
            continue
        if equipment_type and equipment_type != ALL_TYPES and item.type != equipment_type:
            continue
        if location and location != ALL_LOCATIONS and location not in item.location:
            continue
        results.append(item)
    return results


def filter_land(
    items: Iterable[LandListing],
    query: Optional[str] = None,
    state: Optional[str] = None,
) -> List[LandListing]:
    results = []
    for item in items:
        if not _matches_query(query, item.location, item.title):
            continue
        if state and state not in item.location:
            continue
        results.append(item)
    return results


def clamp(value: Union[int, float], low: Union[int, float], high: Union[int, float]):
    return min(max(low, value), high)


def _parse_days(days: Union[int, str, None], default: int) -> int:
    if days is None:
        return default
    try:
        return int(str(days).strip())
    except ValueError:
        return default


def quote_rental(listing: EquipmentListing, days: Union[int, str, None]) -> RentalQuote:
    parsed = _parse_days(days, listing.min_days)
    rent_days = clamp(parsed, listing.min_days, listing.max_days)
    total = rent_days * listing.price_per_day
    return RentalQuote(
        equipment_id=listing.id,
        days=rent_days,
        price_per_day=listing.price_per_day,
        total=total,
        message=f"Rental request sent for {rent_days} days. Total: ₹{format_inr(total)}",
    )


def negotiation_bounds(base_price: int) -> tuple[int, int]:
    return (
        math.floor(round(base_price * NEGOTIATION_DISCOUNT, 6)),
        math.ceil(round(base_price * NEGOTIATION_MARKUP, 6)),
    )


def negotiate_land_price(
    listing: LandListing, proposed: Optional[Union[int, float]] = None
) -> NegotiationResult:
    base = listing.price_per_acre
    low, high = negotiation_bounds(base)
    value = base if proposed is None else int(round(clamp(proposed, low, high)))
    percent = round(abs(value - base) / base * 100, 1)
    if value < base:
        direction, tone = "below", "warn"
    elif value > base:
        direction, tone = "above", "alert"
    else:
        direction, tone = "equal", "neutral"
    if direction == "equal":
        message = "Contacting owner with original price..."
    else:
        message = (
            f"Proposal sent: ₹{format_inr(value)}/acre/year "
            f"({percent}% {direction} asking price)"
        )
    return NegotiationResult(
        land_id=listing.id,
        base_price=base,
        min_price=low,
        max_price=high,
        value=value,
        percent=percent,
        direction=direction,
        tone=tone,
        message=message,
    )


def equipment_share_payload(listing: EquipmentListing, url: str) -> SharePayload:
    return SharePayload(
        title=f"Rent {listing.name}",
        text=f"Check out this {listing.type} for rent in {listing.location}",
        url=url,
    )


def land_share_payload(listing: LandListing, url: str) -> SharePayload:
    return SharePayload(
        title=f"Lease {listing.title}",
        text=f"{listing.area} acres of {listing.soil_type} for lease in {listing.location}",
        url=url,
    )
