"""Records read from the store and the per-run result."""

from dataclasses import dataclass
from datetime import date
from enum import Enum


class TimeSlot(str, Enum):
    AFTERNOON = "afternoon"
    EVENING = "evening"

    @classmethod
    def from_store(cls, value: str | None) -> "TimeSlot":
        """Map the store's ``horaire`` column. Only ``nuit`` means evening."""
        if value and value.strip().lower() in ("nuit", "evening"):
            return cls.EVENING
        return cls.AFTERNOON


class DigestType(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class Reservation:
    """A booking of the venue."""
    date: date
    time_slot: TimeSlot
    last_name: str
    first_name: str
    notes: str | None = None

    @classmethod
    def from_row(cls, row: dict) -> "Reservation":
        """Build from a ``reservations`` row. Raises KeyError/ValueError on bad rows."""
        return cls(
            date=date.fromisoformat(str(row["date_res"])[:10]),
            time_slot=TimeSlot.from_store(row.get("horaire")),
            last_name=row.get("nom") or "",
            first_name=row.get("prenom") or "",
            notes=row.get("notes") or None,
        )


@dataclass(frozen=True)
class Recipient:
    email: str
    name: str | None = None

    @classmethod
    def from_row(cls, row: dict) -> "Recipient":
        return cls(email=row.get("email") or "", name=row.get("nom") or None)


@dataclass(frozen=True)
class DigestWindow:
    """Closed date range [start, end] covered by one digest."""
    start: date
    end: date

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


@dataclass
class DigestResult:
    """Outcome of one run."""
    attempted: int
    succeeded: int
    failed: int
    reservation_count: int
    window: DigestWindow

    def to_payload(self, message: str) -> dict:
        """JSON body returned to the HTTP trigger."""
        return {
            "message": message,
            "success": self.succeeded,
            "failures": self.failed,
            "reservations": self.reservation_count,
            "start_date": self.window.start.isoformat(),
            "end_date": self.window.end.isoformat(),
        }
