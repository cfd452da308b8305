"""Digest content generator."""

import logging
from datetime import date
from pathlib import Path

import html2text
from jinja2 import Environment, FileSystemLoader

from ..models import DigestType, DigestWindow, Reservation, TimeSlot

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).parent / "templates"

_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
)

# Configure html2text for the plain-text alternative
_h2t = html2text.HTML2Text()
_h2t.ignore_links = True
_h2t.ignore_images = True
_h2t.body_width = 0  # No wrapping

_WEEKDAYS_FR = ["lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche"]
_MONTHS_FR = [
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
]

NOTES_SEPARATOR = " • "


def format_date_fr(day: date) -> str:
    """Long French date, e.g. ``lundi 3 novembre 2025``."""
    return f"{_WEEKDAYS_FR[day.weekday()]} {day.day} {_MONTHS_FR[day.month - 1]} {day.year}"


def format_time_slot(slot: TimeSlot, branding: dict) -> str:
    return branding["time_slots"][slot.value]


def format_notes(notes: str | None) -> str:
    """Collapse line breaks into a single-line list."""
    if not notes:
        return ""
    lines = notes.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    return NOTES_SEPARATOR.join(lines)


def build_subject(digest_type: DigestType, branding: dict) -> str:
    return branding["subjects"][digest_type.value]


def render_weekly_digest(
    reservations: list[Reservation],
    window: DigestWindow,
    branding: dict,
) -> str:
    """Render the HTML digest for *window*.

    Reservations are listed in the order given; an empty list renders the
    "nothing scheduled" message instead.
    """
    entries = [
        {
            "date": format_date_fr(r.date),
            "time_slot": format_time_slot(r.time_slot, branding),
            "name": f"{r.first_name} {r.last_name}".strip(),
            "notes": format_notes(r.notes),
        }
        for r in reservations
    ]

    template = _env.get_template("weekly_digest.html")
    html = template.render(
        branding=branding,
        start_label=format_date_fr(window.start),
        end_label=format_date_fr(window.end),
        entries=entries,
    )

    logger.debug(f"Rendered digest for {window.start} - {window.end} with {len(entries)} reservations")
    return html


def render_text(html: str) -> str:
    """Plain-text alternative of a rendered digest."""
    return _h2t.handle(html).strip()
