"""API routes for triggering the digest."""

import logging
from typing import Callable

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ...errors import UpstreamQueryError
from ...job import WeeklyDigestJob

logger = logging.getLogger(__name__)
router = APIRouter()


class DigestResponse(BaseModel):
    """Outcome of a digest run."""
    message: str
    success: int
    failures: int
    reservations: int
    start_date: str
    end_date: str


def get_job_factory() -> Callable[[], WeeklyDigestJob]:
    """Dependency returning how to build a job; overridden in tests."""
    return WeeklyDigestJob.from_config


@router.api_route("/weekly-email", methods=["GET", "POST"], response_model=DigestResponse)
async def weekly_email(job_factory: Callable[[], WeeklyDigestJob] = Depends(get_job_factory)):
    """Run the weekly digest once and report the outcome."""
    try:
        job = job_factory()
        result = await job.run()
    except UpstreamQueryError as e:
        logger.error(f"Weekly digest aborted: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})
    except Exception as e:
        logger.exception("Weekly digest failed")
        return JSONResponse(status_code=500, content={"error": str(e) or type(e).__name__})

    if result.attempted == 0:
        return DigestResponse(**result.to_payload("No recipients found"))
    return DigestResponse(**result.to_payload("Weekly emails sent"))
