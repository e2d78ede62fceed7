"""
SheetRelay Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Tests never talk to Google. An in-memory FakeWorkspaceClient stands in
       for GoogleWorkspaceClient so RecordService and the routes run their
       real logic against a spreadsheet held in a dict.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── fake_client: In-memory spreadsheet with a seeded "Products" sheet
    ├── product_service / generic_service: RecordService per layout
    ├── fake_storage: ImageStorage stub returning a fixed Drive link
    ├── sample_image_bytes: Minimal JPEG for upload tests
    └── test_client: HTTPX AsyncClient wired to the app with fakes injected
"""

import os
import re
import tempfile
from typing import Any, Dict, List, Optional

# Override settings BEFORE any sheetrelay import
os.environ["SPREADSHEET_ID"] = "test-spreadsheet-id"
os.environ["DRIVE_FOLDER_ID"] = "test-folder-id"
os.environ["SHEET_LAYOUT"] = "product"
os.environ["GOOGLE_CREDENTIALS_FILE"] = os.path.join(tempfile.gettempdir(), "sheetrelay-missing.json")
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from sheetrelay.models.layout import GENERIC_LAYOUT, PRODUCT_LAYOUT
from sheetrelay.services.record_service import RecordService
from sheetrelay.services.storage_base import ImageStorage


# ══════════════════════════════════════════════════════════════════════════
# In-memory Google Workspace client
# ══════════════════════════════════════════════════════════════════════════

_CELL = re.compile(r"^\$?([A-Z]+)\$?(\d*)$")


def _column_index(letters: str) -> int:
    index = 0
    for char in letters:
        index = index * 26 + (ord(char) - ord("A") + 1)
    return index - 1


def _split_range(range_a1: str):
    sheet, _, cells = range_a1.rpartition("!")
    if sheet.startswith("'") and sheet.endswith("'"):
        sheet = sheet[1:-1].replace("''", "'")
    start, _, end = cells.partition(":")
    start_col, start_row = _CELL.match(start.upper()).groups()
    if end:
        end_col, end_row = _CELL.match(end.upper()).groups()
    else:
        end_col, end_row = start_col, start_row
    return (
        sheet,
        _column_index(start_col),
        int(start_row) - 1 if start_row else 0,
        _column_index(end_col),
        int(end_row) if end_row else None,
    )


class FakeWorkspaceClient:
    """
    Mimics GoogleWorkspaceClient over {sheet title: [[cell, ...], ...]}.

    Like the real API, reads return cells as strings with trailing empty
    cells and trailing empty rows trimmed. Every call is recorded in
    `calls` as (method name, first argument).
    """

    def __init__(self, sheets: Optional[Dict[str, List[List[Any]]]] = None):
        self.spreadsheet_id = "test-spreadsheet-id"
        self.sheets = {title: [list(row) for row in rows] for title, rows in (sheets or {}).items()}
        self.sheet_ids = {title: 100 + i for i, title in enumerate(self.sheets)}
        self.calls: List[tuple] = []
        self.uploads: List[dict] = []
        self.public: List[str] = []

    @property
    def write_calls(self) -> List[tuple]:
        return [c for c in self.calls if c[0] in {"append_values", "update_values", "delete_rows"}]

    def rows(self, sheet: str) -> List[List[Any]]:
        return self.sheets[sheet]

    def get_values(self, range_a1: str) -> List[List[Any]]:
        self.calls.append(("get_values", range_a1))
        sheet, c0, r0, c1, r1 = _split_range(range_a1)
        rows = self.sheets.get(sheet)
        if rows is None:
            raise_upstream(f"Unable to parse range: {range_a1}")
        result = []
        for row in rows[r0:r1]:
            cells = ["" if v is None else str(v) for v in row[c0:c1 + 1]]
            while cells and cells[-1] == "":
                cells.pop()
            result.append(cells)
        while result and not result[-1]:
            result.pop()
        return result

    def append_values(self, range_a1: str, rows: List[List[Any]]) -> Dict[str, Any]:
        self.calls.append(("append_values", range_a1))
        sheet = _split_range(range_a1)[0]
        self.sheets.setdefault(sheet, []).extend(list(r) for r in rows)
        return {"updates": {"updatedRows": len(rows), "updatedRange": range_a1}}

    def update_values(self, range_a1: str, rows: List[List[Any]]) -> Dict[str, Any]:
        self.calls.append(("update_values", range_a1))
        sheet, col, row, _, _ = _split_range(range_a1)
        target = self.sheets[sheet][row]
        while len(target) <= col:
            target.append("")
        target[col] = rows[0][0]
        return {"updatedCells": 1, "updatedRange": range_a1}

    def list_sheets(self) -> List[Dict[str, Any]]:
        self.calls.append(("list_sheets", None))
        return [{"title": t, "sheetId": i} for t, i in self.sheet_ids.items()]

    def find_sheet_id(self, title: str) -> Optional[int]:
        self.calls.append(("find_sheet_id", title))
        return self.sheet_ids.get(title)

    def delete_rows(self, sheet_id: int, start_index: int, end_index: int) -> Dict[str, Any]:
        self.calls.append(("delete_rows", (sheet_id, start_index, end_index)))
        title = next(t for t, i in self.sheet_ids.items() if i == sheet_id)
        del self.sheets[title][start_index:end_index]
        return {"replies": [{}]}

    def ping(self) -> None:
        self.calls.append(("ping", None))

    def upload_file(self, filename, content, mimetype, folder_id=None):
        self.calls.append(("upload_file", filename))
        file_id = f"file{len(self.uploads) + 1}"
        self.uploads.append({"id": file_id, "name": filename, "mimetype": mimetype, "folder": folder_id})
        return {"id": file_id, "name": filename, "webViewLink": f"https://drive.google.com/file/d/{file_id}/view?usp=drivesdk"}

    def make_public(self, file_id: str) -> None:
        self.calls.append(("make_public", file_id))
        self.public.append(file_id)


def raise_upstream(message: str):
    from sheetrelay.exceptions import UpstreamServiceError
    raise UpstreamServiceError(message=message, status=400)


PRODUCT_HEADER = [
    "SKU", "Size", "Code", "Product Name", "SMER", "SMER Updated", "KGA Price",
    "Margin", "Stock", "Picture", "Shop", "Lazada", "TikTok",
]


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def fake_client():
    """A spreadsheet with a header row and three products, plus an empty tab."""
    return FakeWorkspaceClient({
        "Products": [
            PRODUCT_HEADER,
            ["SKU-001", "M", "C1", "Tile A", "100", "110", "95", "", "", "https://drive.google.com/file/d/abc123/view?usp=sharing"],
            ["SKU-002", "L", "C2", "Tile B", "200", "210", "190"],
            ["SKU-003", "S", "C3", "Tile C", "300", "310", "290", "", "", "https://cdn.example.com/c.png", "https://shop/c"],
        ],
        "Sheet1": [
            ["1700000000000", "first note"],
            ["1700000000001", "second note"],
        ],
        "Empty": [],
    })


@pytest.fixture
def product_service(fake_client):
    return RecordService(client=fake_client, layout=PRODUCT_LAYOUT, default_sheet="Sheet1")


@pytest.fixture
def generic_service(fake_client):
    return RecordService(client=fake_client, layout=GENERIC_LAYOUT, default_sheet="Sheet1")


class FakeImageStorage(ImageStorage):
    def __init__(self):
        self.stored: List[tuple] = []

    async def store_image(self, filename, content, content_length=None):
        self.stored.append((filename, len(content)))
        return "https://drive.google.com/file/d/uploaded42/view?usp=drivesdk"

    def health_check(self) -> str:
        return "configured"


@pytest.fixture
def fake_storage():
    return FakeImageStorage()


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI marker + JFIF header + EOI marker."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest_asyncio.fixture
async def test_client(product_service, fake_storage):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    Services are swapped for fakes with dependency_overrides. App exceptions
    are not re-raised so the catch-all 500 handler can be asserted on.
    """
    from sheetrelay.dependencies import get_image_storage, get_record_service
    from sheetrelay.main import app

    app.dependency_overrides[get_record_service] = lambda: product_service
    app.dependency_overrides[get_image_storage] = lambda: fake_storage
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
