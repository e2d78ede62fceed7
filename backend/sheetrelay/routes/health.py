"""
SheetRelay Backend — Health Check Route
=========================================

What:  GET /health for monitoring and load balancer probes.
How:   Pings the spreadsheet with the cheapest authenticated call and reports
       whether image storage is configured.

Status levels:
    healthy:    Spreadsheet reachable, Drive folder configured
    degraded:   Spreadsheet reachable, uploads disabled
    unhealthy:  Spreadsheet unreachable or not configured
"""

import logging
import time

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from sheetrelay import __version__
from sheetrelay.dependencies import get_image_storage, get_record_service
from sheetrelay.schemas.records import HealthResponse
from sheetrelay.services.record_service import RecordService
from sheetrelay.services.storage_base import ImageStorage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    records: RecordService = Depends(get_record_service),
    storage: ImageStorage = Depends(get_image_storage),
) -> HealthResponse:
    spreadsheet_status = "connected"
    overall = "healthy"

    if not records.client.spreadsheet_id:
        spreadsheet_status = "not_configured"
        overall = "unhealthy"
    else:
        try:
            await run_in_threadpool(records.client.ping)
        except Exception as e:
            spreadsheet_status = "unreachable"
            overall = "unhealthy"
            logger.warning("Health check: spreadsheet unreachable: %s", str(e))

    drive_status = storage.health_check()
    if drive_status != "configured" and overall == "healthy":
        overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        layout=records.layout.name,
        spreadsheet=spreadsheet_status,
        drive=drive_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
