"""
Public site controller

Reads the catalog and submits the lead-capture forms. Session bookings never
fail from the visitor's point of view: when the API cannot be reached (or
rejects the request) the booking is kept in a local JSON file instead.
"""
import json
import logging
import os
from typing import Any, Dict, List, Mapping, Optional

import httpx

from schemas import utcnow

logger = logging.getLogger(__name__)

SESSION_FIELDS = ("name", "email", "phone", "sessionType", "sessionMessage")


class SiteError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BookingResult(dict):
    """Response of a booking; ``stored_locally`` is set when the fallback was used."""

    @property
    def stored_locally(self) -> bool:
        return bool(self.get("storedLocally"))


class SiteClient:
    def __init__(self, http: httpx.Client, fallback_path: str = "sessions.json"):
        self.http = http
        self.fallback_path = fallback_path

    def _post(self, url: str, body: Mapping[str, Any]) -> dict:
        response = self.http.post(url, json=dict(body))
        try:
            data = response.json()
        except ValueError:
            data = {}
        if response.is_error:
            message = data.get("error") if isinstance(data, dict) else None
            raise SiteError(message or response.reason_phrase, response.status_code)
        return data

    def projects(self) -> List[dict]:
        response = self.http.get("/api/projects")
        response.raise_for_status()
        return response.json()["projects"]

    def courses(self) -> List[dict]:
        response = self.http.get("/api/courses")
        response.raise_for_status()
        return response.json()["courses"]

    # Lead capture
    def book_session(self, form: Mapping[str, Any]) -> BookingResult:
        booking = {k: form.get(k) for k in SESSION_FIELDS}
        booking["bookedAt"] = utcnow().isoformat()
        try:
            return BookingResult(self._post("/api/sessions", booking))
        except (httpx.HTTPError, SiteError) as e:
            logger.warning("Booking not accepted by the server (%s); keeping it locally", e)
            self._store_locally(booking)
            return BookingResult(message="Session saved locally", session=booking, storedLocally=True)

    def request_hire(self, form: Mapping[str, Any]) -> dict:
        return self._post("/api/hires", form)["hire"]

    def request_bulk_quote(self, form: Mapping[str, Any]) -> dict:
        return self._post("/api/bulk-quotes", form)["quote"]

    # Accounts
    def register(self, name: str, email: str, password: str, mobile: str) -> dict:
        body = {"name": name, "email": email, "password": password, "mobile": mobile}
        return self._post("/api/register", body)["user"]

    def login(self, identifier: str, password: str) -> dict:
        return self._post("/api/login", {"identifier": identifier, "password": password})["user"]

    def update_profile(self, user_id: str, **changes) -> dict:
        return self._post("/api/update-profile", {"id": user_id, **changes})["user"]

    # Local fallback store
    def pending_bookings(self) -> List[Dict[str, Any]]:
        if not os.path.exists(self.fallback_path):
            return []
        with open(self.fallback_path) as f:
            return json.load(f)

    def _store_locally(self, booking: Dict[str, Any]) -> None:
        bookings = self.pending_bookings()
        bookings.append(booking)
        with open(self.fallback_path, "w") as f:
            json.dump(bookings, f, indent=2)
