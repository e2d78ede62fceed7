"""
SheetRelay Backend — Record Route Handlers
============================================

What:  The row endpoints: GET /data, POST /add, /edit, /delete, /save-image-link.
How:   Each handler pulls fields from the query/body, calls RecordService and
       returns its result. Validation, lookup and error mapping happen below
       (service) and above (global exception handlers).

Route Inventory:
    GET  /data             ?sheet=&range=                 → [[cell, ...], ...]
    POST /add              {text} | {sheet, sku, ...}     → {message, data}
    POST /edit             {sheet?, id, text}             → {message}
    POST /delete           {sheet, sku}                   → {message}
    POST /save-image-link  {sheet, sku, pictureUrl}       → {message}
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from sheetrelay.dependencies import get_record_service
from sheetrelay.schemas.records import (
    AddRowRequest,
    DeleteRowRequest,
    EditRowRequest,
    ErrorResponse,
    MessageResponse,
    RowMatrix,
    SaveImageLinkRequest,
)
from sheetrelay.services.record_service import RecordService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Records"])

_ERRORS = {
    400: {"description": "Missing or invalid field", "model": ErrorResponse},
    404: {"description": "Sheet or row not found", "model": ErrorResponse},
    500: {"description": "Google API failure (raw message)", "model": ErrorResponse},
}


@router.get(
    "/data",
    response_model=RowMatrix,
    responses=_ERRORS,
    summary="Read rows from a sheet",
    description=(
        "Returns the cell values of `range` in `sheet` as an array of rows. "
        "Drive view links in the picture column are converted to direct image URLs. "
        "An empty range returns []."
    ),
)
async def get_data(
    sheet: Optional[str] = Query(default=None, description="Sheet (tab) name"),
    cell_range: Optional[str] = Query(
        default=None,
        alias="range",
        description="A1 cell span, e.g. A1:M. Defaults to the layout's full row span.",
    ),
    service: RecordService = Depends(get_record_service),
) -> RowMatrix:
    return await service.fetch_rows(sheet, cell_range)


@router.post(
    "/add",
    response_model=MessageResponse,
    response_model_exclude_none=True,
    responses=_ERRORS,
    summary="Append a row",
)
async def add_row(
    body: AddRowRequest,
    service: RecordService = Depends(get_record_service),
) -> MessageResponse:
    """Appends one row; existing rows are never overwritten (INSERT_ROWS)."""
    return await service.append_row(body)


@router.post(
    "/edit",
    response_model=MessageResponse,
    response_model_exclude_none=True,
    responses=_ERRORS,
    summary="Edit a row by identifier",
)
async def edit_row(
    body: EditRowRequest,
    service: RecordService = Depends(get_record_service),
) -> MessageResponse:
    return await service.edit_row(body.sheet, body.id, body.text)


@router.post(
    "/delete",
    response_model=MessageResponse,
    response_model_exclude_none=True,
    responses=_ERRORS,
    summary="Delete a row by SKU",
)
async def delete_row(
    body: DeleteRowRequest,
    service: RecordService = Depends(get_record_service),
) -> MessageResponse:
    return await service.delete_row(body.sheet, body.sku)


@router.post(
    "/save-image-link",
    response_model=MessageResponse,
    response_model_exclude_none=True,
    responses=_ERRORS,
    summary="Store a picture URL on a row",
)
async def save_image_link(
    body: SaveImageLinkRequest,
    service: RecordService = Depends(get_record_service),
) -> MessageResponse:
    return await service.save_image_link(body.sheet, body.sku, body.picture_url)
