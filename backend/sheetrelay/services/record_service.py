"""
SheetRelay Backend — Record Service (Sheet CRUD Orchestrator)
===============================================================

What:  Translates record operations into Google Sheets calls.
Why:   Keeps routes HTTP-only; every rule about which column holds what,
       how rows are found and which fields are required lives here.
How:   Validate → (read key column → linear scan) → one write call.
Who:   Called by the record route handlers.

Operation Flow:
    fetch_rows       values.get(range) → rewrite Drive links in picture column
    append_row       validate → values.append(INSERT_ROWS)
    edit_row         validate → values.get(A:<edit col>) → scan → values.update(cell)
    delete_row       validate → spreadsheets.get (sheetId) → values.get(A:A)
                     → scan → batchUpdate(deleteDimension)
    save_image_link  validate → values.get(A:A) → scan → values.update(J<row>)

Row Lookup:
    Linear scan over every fetched row, O(n) per operation, no index.
    First exact match wins. Cell values and the requested identifier are both
    compared as strings, so {"id": 1700000000000} matches the "1700000000000"
    the API returns.

Concurrency:
    The read and the write are two separate API calls. A concurrent writer
    that inserts or deletes rows in between can shift the target row; no
    locking or revision check is attempted.
"""

import logging
import re
import time
from typing import Any, Dict, Iterable, List, Optional

from starlette.concurrency import run_in_threadpool

from sheetrelay.config import settings
from sheetrelay.exceptions import NotFoundError, ValidationError
from sheetrelay.models.layout import SheetLayout, a1_range, get_layout
from sheetrelay.schemas.records import AddRowRequest, MessageResponse, RowMatrix
from sheetrelay.services.google_client import GoogleWorkspaceClient, google_client
from sheetrelay.services.links import rewrite_picture_column

logger = logging.getLogger(__name__)

# Display names used in "X and Y are required" messages
FIELD_LABELS = {
    "id": "ID",
    "text": "Text",
    "sheet": "Sheet",
    "sku": "SKU",
    "productName": "Product name",
    "pictureUrl": "Picture URL",
}

# Ranges like "A:B", "A1:M", "$A$2:C" start at column A
_STARTS_AT_COLUMN_A = re.compile(r"^\$?A(\$?\d+)?(:|$)", re.IGNORECASE)


def is_blank(value: Any) -> bool:
    """
    Falsy values count as missing: None, "", 0, 0.0 and False.

    An id or text of 0 is rejected with 400 like an absent one. Whitespace-only
    strings are present.
    """
    return not value


def require(fields: Dict[str, Any], names: Iterable[str]) -> None:
    """
    Raise ValidationError naming every blank field.

    ("id", "text") both missing → "ID and Text are required"
    """
    names = list(names)
    missing = [name for name in names if is_blank(fields.get(name))]
    if not missing:
        return
    labels = [FIELD_LABELS.get(name, name) for name in names]
    if len(labels) == 1:
        message = f"{labels[0]} is required"
    else:
        message = f"{', '.join(labels[:-1])} and {labels[-1]} are required"
    raise ValidationError(message=message, field=missing[0], context={"missing": missing})


def find_row_index(rows: List[List[Any]], identifier: Any, column: int = 0) -> int:
    """Return the 0-based index of the first row whose `column` equals identifier, or -1."""
    target = str(identifier)
    for index, row in enumerate(rows):
        if len(row) > column and str(row[column]) == target:
            return index
    return -1


class RecordService:
    """
    Business logic for sheet-backed records.

    Stateless apart from its collaborators: the workspace client, the
    column layout and the fallback sheet name.
    """

    def __init__(
        self,
        client: Optional[GoogleWorkspaceClient] = None,
        layout: Optional[SheetLayout] = None,
        default_sheet: Optional[str] = None,
    ):
        self.client = client or google_client
        self.layout = layout or get_layout(settings.sheet_layout)
        self.default_sheet = default_sheet or settings.default_sheet

    async def fetch_rows(self, sheet: Optional[str], cell_range: Optional[str] = None) -> RowMatrix:
        """
        Read a range and return it as a row matrix.

        Drive view links in the picture column are rewritten to direct image
        URLs. The rewrite only applies when the range starts at column A,
        since otherwise the picture column is at a different offset.
        """
        require({"sheet": sheet}, ["sheet"])
        cells = cell_range or self.layout.read_range

        rows = await run_in_threadpool(self.client.get_values, a1_range(sheet, cells))
        logger.info("Fetched %d row(s) from %s!%s", len(rows), sheet, cells)

        picture_index = self.layout.picture_index
        if rows and picture_index is not None and _STARTS_AT_COLUMN_A.match(cells):
            rows = rewrite_picture_column(rows, picture_index)
        return rows

    async def append_row(self, request: AddRowRequest) -> MessageResponse:
        """Append one row laid out by the active layout. Insert semantics, never overwrite."""
        fields = request.fields_by_column_name()
        require(fields, self.layout.required)

        sheet = fields.get("sheet") or self.default_sheet
        if self.layout.auto_key:
            fields[self.layout.key_field] = int(time.time() * 1000)

        row = self.layout.build_row(fields)
        target = a1_range(sheet, f"{self.layout.key_letter}:{self.layout.last_letter}")
        response = await run_in_threadpool(self.client.append_values, target, [row])

        logger.info("Row added to %s with key %s", sheet, fields.get(self.layout.key_field))
        return MessageResponse(message="Added successfully", data=response)

    async def edit_row(
        self,
        sheet: Optional[str],
        identifier: Any,
        text: Any,
    ) -> MessageResponse:
        """Overwrite the edit column of the row whose key equals `identifier`."""
        require({"id": identifier, "text": text}, ["id", "text"])
        sheet = sheet or self.default_sheet
        layout = self.layout

        rows = await run_in_threadpool(
            self.client.get_values,
            a1_range(sheet, layout.key_range(through=layout.edit_field)),
        )
        if not rows:
            raise NotFoundError(resource="sheet data", message="No data found")

        index = find_row_index(rows, identifier)
        if index == -1:
            raise NotFoundError(resource="row", resource_id=str(identifier))

        # A1 rows are 1-based
        cell = f"{layout.letter_of(layout.edit_field)}{index + 1}"
        await run_in_threadpool(self.client.update_values, a1_range(sheet, cell), [[text]])

        logger.info("Edited %s!%s for key %s", sheet, cell, identifier)
        return MessageResponse(message="Edited successfully")

    async def delete_row(self, sheet: Optional[str], identifier: Any) -> MessageResponse:
        """
        Remove the row whose key equals `identifier`; later rows shift up.

        The sheet's numeric ID is resolved from spreadsheet metadata by title,
        and the deleted span is [index, index + 1) in 0-based row indices.
        """
        require({"sheet": sheet, "sku": identifier}, ["sheet", "sku"])

        sheet_id = await run_in_threadpool(self.client.find_sheet_id, sheet)
        if sheet_id is None:
            raise NotFoundError(resource="sheet", resource_id=sheet)

        rows = await run_in_threadpool(
            self.client.get_values,
            a1_range(sheet, self.layout.key_range()),
        )
        index = find_row_index(rows, identifier)
        if index == -1:
            raise NotFoundError(resource="row", resource_id=str(identifier))

        await run_in_threadpool(self.client.delete_rows, sheet_id, index, index + 1)

        logger.info("Deleted row %d of %s (key %s)", index + 1, sheet, identifier)
        return MessageResponse(message="Deleted successfully")

    async def save_image_link(
        self,
        sheet: Optional[str],
        identifier: Any,
        picture_url: Optional[str],
    ) -> MessageResponse:
        """Write `picture_url` into the picture column of the matching row."""
        layout = self.layout
        if layout.picture_field is None:
            raise ValidationError(
                message=f"The '{layout.name}' sheet layout has no picture column",
                context={"layout": layout.name},
            )
        require(
            {"sheet": sheet, "sku": identifier, "pictureUrl": picture_url},
            ["sheet", "sku", "pictureUrl"],
        )

        rows = await run_in_threadpool(self.client.get_values, a1_range(sheet, layout.key_range()))
        index = find_row_index(rows, identifier)
        if index == -1:
            raise NotFoundError(resource="row", resource_id=str(identifier))

        cell = f"{layout.letter_of(layout.picture_field)}{index + 1}"
        await run_in_threadpool(self.client.update_values, a1_range(sheet, cell), [[picture_url]])

        logger.info("Saved image link to %s!%s for key %s", sheet, cell, identifier)
        return MessageResponse(message="Image link saved successfully")


# ── Singleton Instance ────────────────────────────────────────────────────
record_service = RecordService()
