"""Main entry point for reservation-digest."""

import argparse
import asyncio
import json
import logging
import os
import sys
from datetime import date

from dotenv import load_dotenv

from .errors import UpstreamQueryError
from .job import WeeklyDigestJob, run_weekly_digest
from .window import next_week_window, today_in

logger = logging.getLogger(__name__)


def _setup_logging():
    load_dotenv()
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD")


def run_digest(today: date | None = None) -> int:
    """Run the job once and print the JSON outcome. Returns the exit code."""
    try:
        result = run_weekly_digest(today=today)
    except UpstreamQueryError as e:
        logger.error(f"Weekly digest aborted: {e}")
        print(json.dumps({"error": str(e)}))
        return 1
    except Exception as e:
        logger.exception("Weekly digest failed")
        print(json.dumps({"error": str(e) or type(e).__name__}))
        return 1

    message = "Weekly emails sent" if result.attempted else "No recipients found"
    print(json.dumps(result.to_payload(message), ensure_ascii=False))
    return 0


def preview_digest(today: date | None = None, output: str | None = None, text: bool = False) -> int:
    """Render the digest without sending it."""
    job = WeeklyDigestJob.from_config(today=today)
    window = job.window()

    try:
        reservations, _ = asyncio.run(job.fetch(window))
    except UpstreamQueryError as e:
        logger.error(f"Preview failed: {e}")
        return 1

    html, plain = job.render(reservations, window)
    content = plain if text else html

    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(content)
        logger.info(f"Wrote preview for {window.start} - {window.end} to {output}")
    else:
        print(content)
    return 0


def serve(host: str, port: int):
    import uvicorn

    uvicorn.run("reservation_digest.web.app:app", host=host, port=port)


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="reservation-digest - weekly reservation e-mails")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Run command
    run_parser = subparsers.add_parser("run", help="Build and send the weekly digest")
    run_parser.add_argument("--date", type=_parse_date, help="Pretend today is this date (YYYY-MM-DD)")

    # Preview command
    preview_parser = subparsers.add_parser("preview", help="Render the digest without sending it")
    preview_parser.add_argument("--date", type=_parse_date, help="Pretend today is this date (YYYY-MM-DD)")
    preview_parser.add_argument("--output", "-o", help="Write to this file instead of stdout")
    preview_parser.add_argument("--text", action="store_true", help="Render the plain-text version")

    # Window command
    window_parser = subparsers.add_parser("window", help="Print the week a digest would cover")
    window_parser.add_argument("--date", type=_parse_date, help="Reference date (default: today)")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP trigger")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8080")))

    args = parser.parse_args()
    _setup_logging()

    if args.command == "run":
        sys.exit(run_digest(today=args.date))

    elif args.command == "preview":
        sys.exit(preview_digest(today=args.date, output=args.output, text=args.text))

    elif args.command == "window":
        window = next_week_window(args.date or today_in(os.environ.get("DIGEST_TIMEZONE", "Europe/Paris")))
        print(f"{window.start.isoformat()} {window.end.isoformat()}")

    elif args.command == "serve":
        serve(args.host, args.port)

    else:
        parser.print_help()


if __name__ == "__main__":
    main()
