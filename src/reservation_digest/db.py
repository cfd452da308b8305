"""Supabase database client."""

import logging
from typing import Any
import httpx

from .config import Config, get_config
from .errors import UpstreamQueryError
from .models import DigestWindow, Recipient, Reservation

logger = logging.getLogger(__name__)


class Database:
    """Read-only Supabase REST API client."""

    def __init__(self, config: Config | None = None, client: httpx.Client | None = None):
        config = config or get_config()
        self.base_url = f"{config.supabase_url.rstrip('/')}/rest/v1"
        self.headers = {
            "apikey": config.supabase_key,
            "Authorization": f"Bearer {config.supabase_key}",
            "Content-Type": "application/json",
        }
        self._client = client or httpx.Client(timeout=30.0)
        self._client.headers.update(self.headers)

    def _request(self, method: str, endpoint: str, **kwargs) -> Any:
        """Make a request to the Supabase REST API."""
        url = f"{self.base_url}/{endpoint}"
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UpstreamQueryError(
                f"{method} {endpoint} returned {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamQueryError(f"{method} {endpoint} failed: {e}") from e

        if not response.text:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamQueryError(f"{method} {endpoint} returned invalid JSON: {response.text[:200]}") from e

    # --- Reservations ---

    def get_reservations_between(self, window: DigestWindow) -> list[Reservation]:
        """Get reservations dated inside the window, oldest first."""
        endpoint = (
            "reservations?"
            "select=date_res,horaire,nom,prenom,notes&"
            f"date_res=gte.{window.start.isoformat()}&"
            f"date_res=lte.{window.end.isoformat()}&"
            "order=date_res.asc"
        )
        rows = self._request("GET", endpoint) or []
        try:
            return [Reservation.from_row(row) for row in rows]
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamQueryError(f"Malformed reservation row: {e}") from e

    # --- Recipients ---

    def get_recipients(self) -> list[Recipient]:
        """Get every registered user."""
        rows = self._request("GET", "users?select=email,nom") or []
        try:
            return [Recipient.from_row(row) for row in rows]
        except (AttributeError, TypeError) as e:
            raise UpstreamQueryError(f"Malformed user row: {e}") from e

    def close(self):
        self._client.close()


# Global database instance
_db: Database | None = None


def get_db() -> Database:
    """Get or create the global database instance."""
    global _db
    if _db is None:
        _db = Database()
    return _db
