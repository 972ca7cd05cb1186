"""HTTP interface for the hotel-chain admin console."""
from __future__ import annotations

import logging
import secrets
from contextlib import asynccontextmanager
from datetime import date
from typing import AbstractSet, Dict, List, Optional

from fastapi import FastAPI, Form, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response
from pydantic import BaseModel, Field

from .bookings import (
    ACTIVE_STATUS,
    HOTELS,
    booking_total,
    can_book_for,
    customer_stats,
    matches_search,
    visible_hotels,
)
from .config import Settings, load_settings
from .database import DEMO_ACCOUNTS, Database
from .models import Identity, Role, Severity
from .notifications import NotificationStore
from .security import PAGE_ROLES, GuardDecision, guard, is_authorized, resolve_page
from .sessions import SessionStore
from .storage import LocalStorage, SessionCipher, SessionPersistence

logger = logging.getLogger("hotelchain.console")

PAGE_LABELS: Dict[str, str] = {
    "dashboard": "Dashboard",
    "hotels": "Hotels",
    "employees": "Employees",
    "customers": "Customers",
    "expenses": "Expenses",
    "reports": "Reports",
    "settings": "Settings",
}


class CustomerCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(default="", max_length=255)
    phone: str = Field(default="", max_length=64)
    address: str = Field(default="", max_length=512)


class BookingCreateRequest(BaseModel):
    hotel_id: str = Field(..., min_length=1)
    room_number: Optional[str] = Field(default=None, max_length=32)
    check_in_date: date
    check_out_date: Optional[date] = None
    room_charges: float = Field(default=0, ge=0)
    laundry_charges: float = Field(default=0, ge=0)
    room_service_charges: float = Field(default=0, ge=0)
    other_charges: float = Field(default=0, ge=0)
    notes: Optional[str] = Field(default=None, max_length=2000)


def build_session_store(database: Database, settings: Settings) -> SessionStore:
    storage = LocalStorage(database.path)
    return SessionStore(SessionPersistence(storage, SessionCipher(settings.session_key)))


def create_app(
    *,
    database: Optional[Database] = None,
    session_store: Optional[SessionStore] = None,
    notifications: Optional[NotificationStore] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Create the console application and wire its stores together."""

    if settings is None:
        settings = load_settings()
    if database is None:
        database = Database(settings.database_path)
        database.initialize()
    if session_store is None:
        session_store = build_session_store(database, settings)
    if notifications is None:
        notifications = NotificationStore(max_entries=settings.notification_limit)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await session_store.restore()
        yield

    app = FastAPI(
        title="HotelChain Admin Console",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.database = database
    app.state.session_store = session_store
    app.state.notifications = notifications

    def _redirect(request: Request, name: str, **params: str) -> RedirectResponse:
        return RedirectResponse(
            request.url_for(name, **params),
            status_code=status.HTTP_303_SEE_OTHER,
        )

    def _check_access(
        request: Request, allowed_roles: Optional[AbstractSet[Role]] = None
    ) -> Optional[Response]:
        decision = guard(session_store, allowed_roles)
        if decision is GuardDecision.PENDING:
            return JSONResponse(
                {"detail": "Session restore in progress"},
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        if decision is GuardDecision.LOGIN:
            return _redirect(request, "show_login")
        if decision is GuardDecision.UNAUTHORIZED:
            return _redirect(request, "unauthorized")
        return None

    def _require_identity() -> Identity:
        identity = session_store.current_identity()
        if identity is None:  # pragma: no cover - guarded by _check_access
            raise RuntimeError("No signed-in operator")
        return identity

    def _error(message: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> JSONResponse:
        return JSONResponse({"detail": message}, status_code=status_code)

    def _menu_for(role: Role) -> List[Dict[str, str]]:
        return [
            {"id": page, "label": label}
            for page, label in PAGE_LABELS.items()
            if is_authorized(PAGE_ROLES[page], role)
        ]

    @app.get("/", name="root")
    async def root(request: Request):
        return _redirect(request, "show_page", page="dashboard")

    @app.get("/login", name="show_login")
    async def login_form(request: Request):
        decision = guard(session_store)
        if decision is GuardDecision.PENDING:
            return _error("Session restore in progress", status.HTTP_503_SERVICE_UNAVAILABLE)
        if decision is GuardDecision.ALLOW:
            return _redirect(request, "root")
        return {
            "authenticated": False,
            "demo_accounts": [entry["email"] for entry in DEMO_ACCOUNTS],
        }

    @app.post("/login", name="process_login")
    async def process_login(request: Request, email: str = Form(...), password: str = Form(...)):
        identity = database.authenticate(email, password)
        if identity is None:
            logger.info("Rejected sign-in attempt for %s", email.strip().lower())
            return _error("Invalid email or password.", status.HTTP_401_UNAUTHORIZED)

        session_store.login(identity, secrets.token_urlsafe(32))
        return _redirect(request, "root")

    @app.get("/logout", name="logout")
    async def logout(request: Request):
        session_store.logout()
        return _redirect(request, "show_login")

    @app.get("/unauthorized", name="unauthorized")
    async def unauthorized(request: Request):
        identity = session_store.current_identity()
        return JSONResponse(
            {
                "detail": "You do not have permission to view this page.",
                "role": identity.role.value if identity else None,
            },
            status_code=status.HTTP_403_FORBIDDEN,
        )

    @app.get("/pages/{page}", name="show_page")
    async def show_page(request: Request, page: str):
        resolved = resolve_page(page)
        denied = _check_access(request, PAGE_ROLES[resolved])
        if denied is not None:
            return denied

        identity = _require_identity()
        payload: Dict[str, object] = {
            "page": resolved,
            "title": PAGE_LABELS[resolved],
            "user": identity.to_dict(),
            "menu": _menu_for(identity.role),
            "unread_notifications": notifications.unread_count(),
        }
        if resolved == "hotels":
            payload["hotels"] = visible_hotels(identity)
        return payload

    @app.get("/customers", name="list_customers")
    async def list_customers(request: Request, search: str = ""):
        denied = _check_access(request, PAGE_ROLES["customers"])
        if denied is not None:
            return denied

        customers = database.select("customers", order_by="created_at", descending=True)
        if not customers.ok:
            return _error(customers.error or "Failed to load customers")
        bookings = database.select("bookings")
        if not bookings.ok:
            return _error(bookings.error or "Failed to load bookings")

        term = search.strip()
        return {
            "customers": [
                {**customer, "stats": customer_stats(customer["id"], bookings.data)}
                for customer in customers.data
                if matches_search(customer, term)
            ]
        }

    @app.post("/customers", name="create_customer", status_code=status.HTTP_201_CREATED)
    async def create_customer(request: Request, payload: CustomerCreateRequest):
        denied = _check_access(request, PAGE_ROLES["customers"])
        if denied is not None:
            return denied

        result = database.insert("customers", payload.model_dump())
        if not result.ok:
            notifications.notify("Customer not saved", result.error or "Unknown error", Severity.ERROR)
            return _error(result.error or "Failed to save customer")

        notifications.notify("Customer added", f"{payload.name} was added.", Severity.SUCCESS)
        logger.info("Customer %s created", result.data["id"])
        return result.data

    @app.get("/customers/{customer_id}", name="customer_details")
    async def customer_details(request: Request, customer_id: str):
        denied = _check_access(request, PAGE_ROLES["customers"])
        if denied is not None:
            return denied

        customer = database.select_by_id("customers", customer_id)
        if not customer.ok:
            return _error("Customer not found", status.HTTP_404_NOT_FOUND)
        bookings = database.select(
            "bookings",
            {"customer_id": customer_id},
            order_by="created_at",
            descending=True,
        )
        if not bookings.ok:
            return _error(bookings.error or "Failed to load bookings")

        return {
            "customer": customer.data,
            "bookings": bookings.data,
            "total_revenue": sum(float(item["total_amount"] or 0) for item in bookings.data),
            "active_bookings": sum(1 for item in bookings.data if item["status"] == ACTIVE_STATUS),
        }

    @app.post(
        "/customers/{customer_id}/bookings",
        name="create_booking",
        status_code=status.HTTP_201_CREATED,
    )
    async def create_booking(request: Request, customer_id: str, payload: BookingCreateRequest):
        denied = _check_access(request, PAGE_ROLES["customers"])
        if denied is not None:
            return denied

        identity = _require_identity()
        if payload.hotel_id not in HOTELS:
            return _error(f"Unknown hotel '{payload.hotel_id}'")
        if not can_book_for(identity, payload.hotel_id):
            return _error(
                "Managers can only create bookings for their assigned hotel.",
                status.HTTP_403_FORBIDDEN,
            )

        customer = database.select_by_id("customers", customer_id)
        if not customer.ok:
            return _error("Customer not found", status.HTTP_404_NOT_FOUND)

        charges = payload.model_dump(include={"room_charges", "laundry_charges", "room_service_charges", "other_charges"})
        record = {
            **charges,
            "customer_id": customer_id,
            "hotel_id": payload.hotel_id,
            "room_number": payload.room_number or None,
            "check_in_date": payload.check_in_date.isoformat(),
            "check_out_date": payload.check_out_date.isoformat() if payload.check_out_date else None,
            "total_amount": booking_total(charges),
            "status": ACTIVE_STATUS,
            "notes": payload.notes or None,
        }
        result = database.insert("bookings", record)
        if not result.ok:
            notifications.notify("Booking not saved", result.error or "Unknown error", Severity.ERROR)
            return _error(result.error or "Failed to save booking")

        notifications.notify(
            "Booking created",
            f"Booking at {HOTELS[payload.hotel_id]} for {customer.data['name']} saved.",
            Severity.SUCCESS,
        )
        logger.info("Booking %s created for customer %s", result.data["id"], customer_id)
        return result.data

    @app.get("/notifications", name="list_notifications")
    async def list_notifications(request: Request):
        denied = _check_access(request)
        if denied is not None:
            return denied
        return {
            "notifications": [item.to_dict() for item in notifications.notifications()],
            "unread": notifications.unread_count(),
        }

    @app.post("/notifications/{notification_id}/read", name="mark_notification_read")
    async def mark_notification_read(request: Request, notification_id: str):
        denied = _check_access(request)
        if denied is not None:
            return denied
        notifications.mark_as_read(notification_id)
        return {"unread": notifications.unread_count()}

    @app.post("/notifications/clear", name="clear_notifications")
    async def clear_notifications(request: Request):
        denied = _check_access(request)
        if denied is not None:
            return denied
        notifications.clear()
        return {"unread": 0}

    return app


__all__ = ["BookingCreateRequest", "CustomerCreateRequest", "build_session_store", "create_app"]
