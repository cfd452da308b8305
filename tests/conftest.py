"""Shared pytest fixtures for the reservation-digest test suite.

Provides:
    branding          -- the packaged branding dict
    make_reservation  -- factory for Reservation records
    fake_db           -- in-memory stand-in for the Supabase client
    transport         -- recording email transport with per-address failures
    config            -- a Config built without touching the environment
"""

import datetime

import pytest

from reservation_digest.config import Config, load_branding
from reservation_digest.errors import UpstreamQueryError
from reservation_digest.models import Recipient, Reservation, TimeSlot


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeDatabase:
    """Mimics Database with canned rows and optional failures."""

    def __init__(self, reservations=None, recipients=None):
        self.reservations = list(reservations or [])
        self.recipients = list(recipients or [])
        self.reservations_error: Exception | None = None
        self.recipients_error: Exception | None = None
        self.windows_queried = []

    def get_reservations_between(self, window):
        self.windows_queried.append(window)
        if self.reservations_error:
            raise self.reservations_error
        return list(self.reservations)

    def get_recipients(self):
        if self.recipients_error:
            raise self.recipients_error
        return list(self.recipients)


class RecordingTransport:
    """Records every delivery; raises for addresses in ``fail_for``."""

    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.attempts: list[str] = []
        self.sent: list[dict] = []

    async def deliver(self, recipient, subject, html, text):
        self.attempts.append(recipient)
        if recipient in self.fail_for:
            raise ConnectionError("mailbox unavailable")
        self.sent.append({"to": recipient, "subject": subject, "html": html, "text": text})


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def branding() -> dict:
    return load_branding()


@pytest.fixture()
def make_reservation():
    """Return a factory building a Reservation with sensible defaults."""

    def _make(
        day: datetime.date,
        last_name: str = "Durand",
        first_name: str = "Marie",
        time_slot: TimeSlot = TimeSlot.AFTERNOON,
        notes: str | None = None,
    ) -> Reservation:
        return Reservation(
            date=day,
            time_slot=time_slot,
            last_name=last_name,
            first_name=first_name,
            notes=notes,
        )

    return _make


@pytest.fixture()
def recipients() -> list[Recipient]:
    return [
        Recipient(email=f"user{i}@example.com", name=f"User {i}")
        for i in range(1, 6)
    ]


@pytest.fixture()
def fake_db(recipients) -> FakeDatabase:
    return FakeDatabase(recipients=recipients)


@pytest.fixture()
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture()
def upstream_error() -> UpstreamQueryError:
    return UpstreamQueryError("GET reservations returned 503: unavailable")


@pytest.fixture()
def config() -> Config:
    return Config(
        supabase_url="https://project.supabase.co",
        supabase_key="service-role-key",
        email_transport="log",
        email_api_url="",
        email_api_key="",
        email_from="",
        smtp_host="smtp.example.com",
        smtp_port=465,
        smtp_username="",
        smtp_password="",
        timezone="Europe/Paris",
        branding_file="",
        log_level="INFO",
        environment="test",
    )
