"""Booking charges and per-customer figures shown by the customer views."""
from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional

from .models import Identity, Role

HOTELS: Dict[str, str] = {
    "1": "Grand Plaza Downtown",
    "2": "Seaside Resort",
    "3": "Mountain View Lodge",
}

CHARGE_FIELDS = ("room_charges", "laundry_charges", "room_service_charges", "other_charges")

ACTIVE_STATUS = "active"


def booking_total(charges: Mapping[str, Optional[float]]) -> float:
    """Sum the charge breakdown; missing or blank charges count as zero."""

    return sum(float(charges.get(name) or 0) for name in CHARGE_FIELDS)


def customer_stats(customer_id: str, bookings: Iterable[Mapping[str, object]]) -> Dict[str, object]:
    own = [booking for booking in bookings if booking.get("customer_id") == customer_id]
    return {
        "total_bookings": len(own),
        "total_revenue": sum(float(booking.get("total_amount") or 0) for booking in own),
        "active_bookings": sum(1 for booking in own if booking.get("status") == ACTIVE_STATUS),
    }


def matches_search(customer: Mapping[str, object], term: str) -> bool:
    if not term:
        return True
    lowered = term.lower()
    name = str(customer.get("name") or "").lower()
    email = str(customer.get("email") or "").lower()
    phone = str(customer.get("phone") or "")
    return lowered in name or lowered in email or term in phone


def visible_hotels(identity: Identity) -> List[Dict[str, str]]:
    """Hotels an operator may act on; managers only see their assigned hotel."""

    hotels = [{"id": hotel_id, "name": name} for hotel_id, name in HOTELS.items()]
    if identity.role is Role.MANAGER:
        return [hotel for hotel in hotels if hotel["id"] == identity.assigned_hotel_id]
    return hotels


def can_book_for(identity: Identity, hotel_id: str) -> bool:
    if identity.role is Role.MANAGER:
        return identity.assigned_hotel_id == hotel_id
    return True


__all__ = [
    "ACTIVE_STATUS",
    "CHARGE_FIELDS",
    "HOTELS",
    "booking_total",
    "can_book_for",
    "customer_stats",
    "matches_search",
    "visible_hotels",
]
