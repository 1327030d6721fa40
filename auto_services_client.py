"""Auto services marketplace API client.

This module defines a small client wrapper around the marketplace REST
API.  It uses the ``requests`` library internally and unwraps the
``{success, data, ...}`` envelope of every response.

The client exposes high‑level methods for the common operations:

* :meth:`register` and :meth:`login` – obtain an access token, which the
  client remembers and sends with later calls.
* :meth:`me` – the profile of the logged-in user.
* :meth:`list_services`, :meth:`get_service`, :meth:`create_service` –
  browse and publish services.
* :meth:`create_booking`, :meth:`list_bookings`,
  :meth:`update_booking_status` – book services and accept or reject
  bookings.
* :meth:`create_order`, :meth:`list_orders` – order auto parts.

Every method returns a tuple ``(data, error)``: ``data`` is the
response's ``data`` member on success and ``error`` is ``None``; on
failure ``data`` is ``None`` and ``error`` is a dictionary with keys
``status_code`` and ``message``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]


class AutoServicesAPI:
    """Client for interacting with the auto services marketplace API."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        prefix: str = "/api/v1",
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL of the server, e.g. ``http://localhost:5000``.
            api_key: Optional access token.  If set, an ``Authorization``
                header with the value ``Bearer <api_key>`` is included in
                all requests.  ``login`` and ``register`` replace it.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            prefix: Path prefix of the versioned API.
            timeout: Timeout in seconds for each request.
        """
        self.base_url = base_url.rstrip("/") + prefix
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Result:
        """Perform an HTTP request to the API and unwrap the envelope."""
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if not response.content:
                return None, None
            body = response.json()
            return body.get("data") if isinstance(body, dict) else body, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    message = err_json.get("message") or err_json.get("detail") or str(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    def _authenticate(self, path: str, payload: Dict[str, Any]) -> Result:
        data, error = self._request("POST", path, json_body=payload)
        if error:
            return None, error
        self.api_key = data.get("token")
        return data, None

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def register(self, payload: Dict[str, Any]) -> Result:
        """Register a user and keep the returned token."""
        return self._authenticate("/users/register", payload)

    def login(self, email: str, password: str) -> Result:
        """Log in and keep the returned token."""
        return self._authenticate("/users/login", {"email": email, "password": password})

    def me(self) -> Result:
        return self._request("GET", "/users/me")

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------
    def list_services(self, **filters: Any) -> Result:
        """List services.

        Keyword arguments are passed as query parameters, e.g.
        ``list_services(category="MECANIQUE", sort="-price", limit=5)``.
        Operator filters use their query-string name:
        ``list_services(**{"price[lte]": 500})``.
        """
        return self._request("GET", "/services", params=filters or None)

    def get_service(self, service_id: Any) -> Result:
        return self._request("GET", f"/services/{service_id}")

    def create_service(self, payload: Dict[str, Any]) -> Result:
        return self._request("POST", "/services", json_body=payload)

    # ------------------------------------------------------------------
    # Bookings
    # ------------------------------------------------------------------
    def create_booking(self, service_id: Any, booking_date: str, notes: Optional[str] = None) -> Result:
        payload: Dict[str, Any] = {"service_id": service_id, "booking_date": booking_date}
        if notes is not None:
            payload["notes"] = notes
        return self._request("POST", "/bookings", json_body=payload)

    def list_bookings(self, **filters: Any) -> Result:
        return self._request("GET", "/bookings", params=filters or None)

    def update_booking_status(self, booking_id: Any, status: str) -> Result:
        """Accept or reject a booking (provider or admin token required)."""
        return self._request("PATCH", f"/bookings/{booking_id}/status", json_body={"status": status})

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------
    def create_order(self, items: list[Dict[str, Any]]) -> Result:
        return self._request("POST", "/orders", json_body={"items": items})

    def list_orders(self, **filters: Any) -> Result:
        return self._request("GET", "/orders", params=filters or None)
