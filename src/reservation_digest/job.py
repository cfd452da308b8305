"""Weekly reservation digest job.

Architecture:
- Compute next week's window
- Fetch reservations and recipients concurrently (sync client in a thread pool)
- Render the digest once
- Send to every recipient concurrently and wait for all sends to settle
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date

from .config import Config, get_config, load_branding
from .db import Database, get_db
from .digest.generator import render_text, render_weekly_digest
from .digest.sender import EmailTransport, get_transport, send_digest
from .errors import UpstreamQueryError
from .models import DigestResult, DigestType, DigestWindow, Recipient, Reservation
from .window import next_week_window, today_in

logger = logging.getLogger(__name__)


class WeeklyDigestJob:
    """Send next week's reservations to every registered user."""

    def __init__(
        self,
        db: Database,
        transport: EmailTransport,
        branding: dict,
        timezone: str = "Europe/Paris",
        today: date | None = None,
        owns_db: bool = False,
    ):
        self.db = db
        self._owns_db = owns_db
        self.transport = transport
        self.branding = branding
        self.timezone = timezone
        self._today = today

    @classmethod
    def from_config(cls, config: Config | None = None, today: date | None = None) -> "WeeklyDigestJob":
        # An explicit config gets its own client, closed when run() finishes
        owns_db = config is not None
        db = Database(config) if owns_db else get_db()
        config = config or get_config()
        return cls(
            db=db,
            transport=get_transport(config),
            branding=load_branding(config.branding_file),
            timezone=config.timezone,
            today=today,
            owns_db=owns_db,
        )

    def window(self) -> DigestWindow:
        return next_week_window(self._today or today_in(self.timezone))

    async def fetch(self, window: DigestWindow) -> tuple[list[Reservation], list[Recipient]]:
        """Run both store queries concurrently. Any failure aborts the run."""
        loop = asyncio.get_running_loop()
        with ThreadPoolExecutor(max_workers=2) as executor:
            reservations, recipients = await asyncio.gather(
                loop.run_in_executor(executor, self.db.get_reservations_between, window),
                loop.run_in_executor(executor, self.db.get_recipients),
                return_exceptions=True,
            )

        for label, outcome in (("reservations", reservations), ("users", recipients)):
            if isinstance(outcome, UpstreamQueryError):
                raise UpstreamQueryError(f"Failed to fetch {label}: {outcome}") from outcome
            if isinstance(outcome, BaseException):
                raise outcome

        # Keep only rows inside the window, ascending by date
        reservations = sorted((r for r in reservations if r.date in window), key=lambda r: r.date)
        return reservations, recipients

    def render(self, reservations: list[Reservation], window: DigestWindow) -> tuple[str, str]:
        html = render_weekly_digest(reservations, window, self.branding)
        return html, render_text(html)

    async def _dispatch(self, recipient: Recipient, html: str, text: str):
        await send_digest(
            self.transport,
            recipient.email,
            html,
            text,
            DigestType.WEEKLY,
            self.branding,
        )

    async def dispatch(self, recipients: list[Recipient], html: str, text: str) -> tuple[int, int]:
        """Send to all recipients at once and return (succeeded, failed)."""
        outcomes = await asyncio.gather(
            *[self._dispatch(r, html, text) for r in recipients],
            return_exceptions=True,
        )

        failed = 0
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                failed += 1
                logger.warning(f"{outcome}")
        return len(outcomes) - failed, failed

    async def run(self) -> DigestResult:
        try:
            return await self._run()
        finally:
            if self._owns_db:
                self.db.close()

    async def _run(self) -> DigestResult:
        window = self.window()
        logger.info(f"Building weekly digest for {window.start} - {window.end}")

        reservations, recipients = await self.fetch(window)
        logger.info(f"Fetched {len(reservations)} reservations and {len(recipients)} recipients")

        if not recipients:
            logger.info("No recipients found, nothing to send")
            return DigestResult(
                attempted=0,
                succeeded=0,
                failed=0,
                reservation_count=len(reservations),
                window=window,
            )

        html, text = self.render(reservations, window)
        succeeded, failed = await self.dispatch(recipients, html, text)

        logger.info("=" * 50)
        logger.info("Weekly digest complete!")
        logger.info(f"  Reservations: {len(reservations)}")
        logger.info(f"  Sent: {succeeded}/{len(recipients)}")
        logger.info(f"  Failures: {failed}")
        logger.info("=" * 50)

        return DigestResult(
            attempted=len(recipients),
            succeeded=succeeded,
            failed=failed,
            reservation_count=len(reservations),
            window=window,
        )


def run_weekly_digest(today: date | None = None) -> DigestResult:
    """Sync wrapper for the async job."""
    job = WeeklyDigestJob.from_config(today=today)
    return asyncio.run(job.run())
