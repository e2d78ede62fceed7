"""
SheetRelay Backend — Google Workspace Client
==============================================

What:  Thin wrapper over the Sheets v4 and Drive v3 discovery clients.
Why:   One place owns credentials, service construction and error translation,
       so services deal in rows and file IDs instead of googleapiclient calls.
How:   Services are built lazily on first use and reused for the life of the
       process. Every call is wrapped so Google failures surface as
       UpstreamServiceError carrying the raw API message.
Who:   RecordService (rows) and DriveImageStorage (uploads).
When:  Created at import; warmed in the app lifespan; closed on shutdown.

Threading:
    googleapiclient is synchronous. Callers run these methods through
    starlette's run_in_threadpool so a slow Google call only delays the
    request that made it. The discovery services wrap an httplib2.Http,
    which is not thread-safe, so each worker thread builds and keeps its
    own pair of services (threading.local). Credentials are shared.
"""

import base64
import io
import json
import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from sheetrelay.config import settings
from sheetrelay.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)


@contextmanager
def upstream_call(operation: str) -> Iterator[None]:
    """
    Translate Google client failures into UpstreamServiceError.

    HttpError keeps the API's own reason text (e.g. "Unable to parse range:
    Foo!A:B") so the caller sees exactly what Google said.
    """
    try:
        yield
    except HttpError as e:
        status = getattr(e.resp, "status", None)
        message = getattr(e, "reason", None) or str(e)
        logger.error("Google API %s failed (%s): %s", operation, status, message)
        raise UpstreamServiceError(
            message=message,
            status=int(status) if status else None,
            context={"operation": operation},
        ) from e
    except (GoogleAuthError, OSError) as e:
        logger.error("Google API %s failed: %s", operation, e)
        raise UpstreamServiceError(
            message=str(e),
            context={"operation": operation, "error_type": type(e).__name__},
        ) from e


class GoogleWorkspaceClient:
    """
    Google Sheets + Drive client bound to one spreadsheet.

    Lifecycle:
        - Construct once per process (module singleton below)
        - Services are built lazily, one Sheets + one Drive service per thread
        - connect() builds the calling thread's services eagerly (startup warm-up)
        - close() releases the HTTP connections of every thread's services
        - Properties rebuild lazily after close(), so reuse is always safe
    """

    SCOPES = [
        "https://www.googleapis.com/auth/spreadsheets",
        "https://www.googleapis.com/auth/drive",
    ]

    def __init__(self, spreadsheet_id: Optional[str] = None):
        self.spreadsheet_id = spreadsheet_id or settings.spreadsheet_id
        self._credentials: Optional[Credentials] = None
        self._local = threading.local()
        self._lock = threading.Lock()
        # Every service built on any thread, so close() can reach them all
        self._built: List[Any] = []

    # ── Credentials & services ────────────────────────────────────────────

    def _get_credentials(self) -> Credentials:
        """Load service account credentials: JSON env → base64 env → key file."""
        with self._lock:
            if self._credentials is None:
                self._credentials = self._load_credentials()
            return self._credentials

    def _load_credentials(self) -> Credentials:
        if settings.google_credentials_json:
            info = json.loads(settings.google_credentials_json)
            creds = Credentials.from_service_account_info(info, scopes=self.SCOPES)
        elif settings.google_credentials_base64:
            decoded = base64.b64decode(settings.google_credentials_base64).decode("utf-8")
            creds = Credentials.from_service_account_info(json.loads(decoded), scopes=self.SCOPES)
        else:
            creds = Credentials.from_service_account_file(
                settings.google_credentials_file,
                scopes=self.SCOPES,
            )
        return creds

    def _thread_service(self, attr: str, api: str, version: str):
        service = getattr(self._local, attr, None)
        if service is None:
            with upstream_call(f"build {api} service"):
                service = build(
                    api, version, credentials=self._get_credentials(), cache_discovery=False
                )
            setattr(self._local, attr, service)
            with self._lock:
                self._built.append(service)
            logger.debug("Built %s %s service for thread %s", api, version, threading.get_ident())
        return service

    @property
    def sheets_service(self):
        """Google Sheets API service owned by the calling thread."""
        return self._thread_service("sheets_service", "sheets", "v4")

    @property
    def drive_service(self):
        """Google Drive API service owned by the calling thread."""
        return self._thread_service("drive_service", "drive", "v3")

    def connect(self) -> None:
        self.sheets_service
        self.drive_service
        logger.info("Google Workspace client ready for spreadsheet %s", self.spreadsheet_id)

    def close(self) -> None:
        with self._lock:
            built, self._built = self._built, []
            self._local = threading.local()
        for service in built:
            service.close()

    # ── Sheets: values ────────────────────────────────────────────────────

    def get_values(self, range_a1: str) -> List[List[Any]]:
        """Read a range. Returns [] when the range holds no data."""
        with upstream_call("values.get"):
            response = self.sheets_service.spreadsheets().values().get(
                spreadsheetId=self.spreadsheet_id,
                range=range_a1,
            ).execute()
        return response.get("values", [])

    def append_values(self, range_a1: str, rows: List[List[Any]]) -> Dict[str, Any]:
        """Append rows below the table in `range_a1`, inserting new rows."""
        logger.info("Appending %d row(s) to %s", len(rows), range_a1)
        with upstream_call("values.append"):
            return self.sheets_service.spreadsheets().values().append(
                spreadsheetId=self.spreadsheet_id,
                range=range_a1,
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body={"values": rows},
            ).execute()

    def update_values(self, range_a1: str, rows: List[List[Any]]) -> Dict[str, Any]:
        logger.info("Updating %s", range_a1)
        with upstream_call("values.update"):
            return self.sheets_service.spreadsheets().values().update(
                spreadsheetId=self.spreadsheet_id,
                range=range_a1,
                valueInputOption="RAW",
                body={"values": rows},
            ).execute()

    # ── Sheets: structure ─────────────────────────────────────────────────

    def list_sheets(self) -> List[Dict[str, Any]]:
        """Return [{"title": ..., "sheetId": ...}, ...] for every tab."""
        with upstream_call("spreadsheets.get"):
            meta = self.sheets_service.spreadsheets().get(
                spreadsheetId=self.spreadsheet_id,
                fields="sheets(properties(title,sheetId))",
            ).execute()
        return [sheet["properties"] for sheet in meta.get("sheets", [])]

    def find_sheet_id(self, title: str) -> Optional[int]:
        for properties in self.list_sheets():
            if properties.get("title") == title:
                return properties.get("sheetId")
        return None

    def batch_update(self, requests: List[Dict[str, Any]]) -> Dict[str, Any]:
        logger.info("Executing %d batch update request(s)", len(requests))
        with upstream_call("spreadsheets.batchUpdate"):
            return self.sheets_service.spreadsheets().batchUpdate(
                spreadsheetId=self.spreadsheet_id,
                body={"requests": requests},
            ).execute()

    def delete_rows(self, sheet_id: int, start_index: int, end_index: int) -> Dict[str, Any]:
        """Delete rows [start_index, end_index) (0-based, end exclusive)."""
        return self.batch_update([
            {
                "deleteDimension": {
                    "range": {
                        "sheetId": sheet_id,
                        "dimension": "ROWS",
                        "startIndex": start_index,
                        "endIndex": end_index,
                    }
                }
            }
        ])

    def ping(self) -> None:
        """Cheapest authenticated call: fetch only the spreadsheet ID."""
        with upstream_call("spreadsheets.get"):
            self.sheets_service.spreadsheets().get(
                spreadsheetId=self.spreadsheet_id,
                fields="spreadsheetId",
            ).execute()

    # ── Drive ─────────────────────────────────────────────────────────────

    def upload_file(
        self,
        filename: str,
        content: bytes,
        mimetype: str,
        folder_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create a Drive file from bytes. Returns {"id", "name", "webViewLink"}."""
        metadata: Dict[str, Any] = {"name": filename}
        if folder_id:
            metadata["parents"] = [folder_id]
        media = MediaIoBaseUpload(io.BytesIO(content), mimetype=mimetype, resumable=False)

        with upstream_call("files.create"):
            created = self.drive_service.files().create(
                body=metadata,
                media_body=media,
                fields="id, name, webViewLink",
                supportsAllDrives=True,
            ).execute()
        logger.info("Uploaded %s to Drive as %s", filename, created.get("id"))
        return created

    def make_public(self, file_id: str) -> None:
        with upstream_call("permissions.create"):
            self.drive_service.permissions().create(
                fileId=file_id,
                body={"type": "anyone", "role": "reader"},
                fields="id",
                supportsAllDrives=True,
            ).execute()


# ── Singleton Instance ────────────────────────────────────────────────────
# One set of discovery clients per process; no per-request reconstruction
google_client = GoogleWorkspaceClient()
