"""
SheetRelay Backend — Google Workspace Client Unit Tests
=========================================================

What:  Tests for GoogleWorkspaceClient request shapes and error translation.
How:   The discovery services are replaced with MagicMocks, so no network
       or credentials are needed.

Test Strategy:
    ✅ Request parameters (RAW, INSERT_ROWS, deleteDimension span)
    ✅ Empty ranges → []
    ✅ HttpError → UpstreamServiceError with the API's own message
    ✅ Credential source order
    ✅ One discovery service (and httplib2.Http) per worker thread
"""

import asyncio
import base64
import json
import threading
from collections import defaultdict
from unittest.mock import MagicMock, patch

import httplib2
import pytest
from googleapiclient.errors import HttpError

from sheetrelay.config import settings
from sheetrelay.exceptions import UpstreamServiceError
from sheetrelay.models.layout import PRODUCT_LAYOUT
from sheetrelay.services.google_client import GoogleWorkspaceClient
from sheetrelay.services.record_service import RecordService


def make_http_error(status: int, message: str) -> HttpError:
    resp = httplib2.Response({"status": status})
    content = json.dumps({"error": {"code": status, "message": message}}).encode("utf-8")
    return HttpError(resp, content)


@pytest.fixture
def client():
    c = GoogleWorkspaceClient(spreadsheet_id="sid")
    c._local.sheets_service = MagicMock()
    c._local.drive_service = MagicMock()
    return c


def values_api(client):
    return client.sheets_service.spreadsheets.return_value.values.return_value


class TestSheetsValues:

    def test_get_values_returns_rows(self, client):
        values_api(client).get.return_value.execute.return_value = {"values": [["a", "b"]]}

        assert client.get_values("Sheet1!A:B") == [["a", "b"]]
        values_api(client).get.assert_called_once_with(spreadsheetId="sid", range="Sheet1!A:B")

    def test_get_values_empty_range(self, client):
        values_api(client).get.return_value.execute.return_value = {"range": "Sheet1!A1:M"}
        assert client.get_values("Sheet1!A1:M") == []

    def test_append_inserts_raw_rows(self, client):
        client.append_values("Products!A:M", [["S1", "M"]])

        values_api(client).append.assert_called_once_with(
            spreadsheetId="sid",
            range="Products!A:M",
            valueInputOption="RAW",
            insertDataOption="INSERT_ROWS",
            body={"values": [["S1", "M"]]},
        )

    def test_update_single_cell(self, client):
        client.update_values("Products!J3", [["https://x"]])

        values_api(client).update.assert_called_once_with(
            spreadsheetId="sid",
            range="Products!J3",
            valueInputOption="RAW",
            body={"values": [["https://x"]]},
        )


class TestSheetsStructure:

    def test_find_sheet_id(self, client):
        spreadsheets = client.sheets_service.spreadsheets.return_value
        spreadsheets.get.return_value.execute.return_value = {
            "sheets": [
                {"properties": {"title": "Sheet1", "sheetId": 0}},
                {"properties": {"title": "Products", "sheetId": 77}},
            ]
        }

        assert client.find_sheet_id("Products") == 77
        assert client.find_sheet_id("Sheet1") == 0
        assert client.find_sheet_id("Missing") is None

    def test_delete_rows_body(self, client):
        spreadsheets = client.sheets_service.spreadsheets.return_value

        client.delete_rows(77, 4, 5)

        spreadsheets.batchUpdate.assert_called_once_with(
            spreadsheetId="sid",
            body={"requests": [{
                "deleteDimension": {
                    "range": {"sheetId": 77, "dimension": "ROWS", "startIndex": 4, "endIndex": 5}
                }
            }]},
        )


class TestErrorTranslation:

    def test_http_error_keeps_api_message(self, client):
        values_api(client).get.return_value.execute.side_effect = make_http_error(
            400, "Unable to parse range: Nope!A:B"
        )

        with pytest.raises(UpstreamServiceError) as exc_info:
            client.get_values("Nope!A:B")

        assert exc_info.value.message == "Unable to parse range: Nope!A:B"
        assert exc_info.value.status == 400
        assert exc_info.value.context["operation"] == "values.get"

    def test_missing_key_file_is_upstream_error(self, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "google_credentials_json", "")
        monkeypatch.setattr(settings, "google_credentials_base64", "")
        monkeypatch.setattr(settings, "google_credentials_file", str(tmp_path / "missing.json"))

        with pytest.raises(UpstreamServiceError):
            GoogleWorkspaceClient(spreadsheet_id="sid").get_values("A:A")


class TestCredentials:

    def test_json_takes_precedence(self, monkeypatch):
        monkeypatch.setattr(settings, "google_credentials_json", '{"type": "service_account"}')
        monkeypatch.setattr(settings, "google_credentials_base64", "ignored")

        with patch("sheetrelay.services.google_client.Credentials") as creds:
            GoogleWorkspaceClient("sid")._get_credentials()

        creds.from_service_account_info.assert_called_once()
        assert creds.from_service_account_info.call_args.args[0] == {"type": "service_account"}

    def test_base64_source(self, monkeypatch):
        encoded = base64.b64encode(b'{"type": "service_account", "project_id": "p"}').decode()
        monkeypatch.setattr(settings, "google_credentials_json", "")
        monkeypatch.setattr(settings, "google_credentials_base64", encoded)

        with patch("sheetrelay.services.google_client.Credentials") as creds:
            GoogleWorkspaceClient("sid")._get_credentials()

        assert creds.from_service_account_info.call_args.args[0]["project_id"] == "p"
        creds.from_service_account_file.assert_not_called()


class TestDrive:

    def test_upload_file_into_folder(self, client):
        files = client.drive_service.files.return_value
        files.create.return_value.execute.return_value = {"id": "f1", "webViewLink": "link"}

        created = client.upload_file("a.png", b"\x89PNG", "image/png", folder_id="folder")

        assert created["id"] == "f1"
        kwargs = files.create.call_args.kwargs
        assert kwargs["body"] == {"name": "a.png", "parents": ["folder"]}
        assert kwargs["fields"] == "id, name, webViewLink"

    def test_make_public(self, client):
        permissions = client.drive_service.permissions.return_value

        client.make_public("f1")

        kwargs = permissions.create.call_args.kwargs
        assert kwargs["fileId"] == "f1"
        assert kwargs["body"] == {"type": "anyone", "role": "reader"}


class TestThreading:

    @pytest.mark.asyncio
    async def test_concurrent_reads_never_share_a_service(self):
        # All four calls must be inside execute() at the same time
        barrier = threading.Barrier(4, timeout=5)
        threads_by_service = defaultdict(set)

        def build_service(*args, **kwargs):
            service = MagicMock()

            def execute():
                threads_by_service[id(service)].add(threading.get_ident())
                barrier.wait()
                return {"values": [["SKU-1"]]}

            service.spreadsheets.return_value.values.return_value.get.return_value.execute.side_effect = execute
            return service

        client = GoogleWorkspaceClient(spreadsheet_id="sid")
        records = RecordService(client=client, layout=PRODUCT_LAYOUT)

        with patch("sheetrelay.services.google_client.build", side_effect=build_service), \
             patch.object(client, "_get_credentials", return_value=MagicMock()):
            results = await asyncio.gather(*(records.fetch_rows("S") for _ in range(4)))

        assert results == [[["SKU-1"]]] * 4
        assert len(threads_by_service) == 4
        assert all(len(threads) == 1 for threads in threads_by_service.values())

    def test_service_reused_within_a_thread(self):
        client = GoogleWorkspaceClient(spreadsheet_id="sid")

        with patch("sheetrelay.services.google_client.build", side_effect=lambda *a, **k: MagicMock()) as build, \
             patch.object(client, "_get_credentials", return_value=MagicMock()):
            assert client.sheets_service is client.sheets_service

        assert build.call_count == 1

    def test_close_reaches_services_of_every_thread(self):
        client = GoogleWorkspaceClient(spreadsheet_id="sid")
        built = []

        def build_service(*args, **kwargs):
            service = MagicMock()
            built.append(service)
            return service

        with patch("sheetrelay.services.google_client.build", side_effect=build_service), \
             patch.object(client, "_get_credentials", return_value=MagicMock()):
            client.sheets_service
            worker = threading.Thread(target=lambda: client.sheets_service)
            worker.start()
            worker.join()

            client.close()
            rebuilt = client.sheets_service

        assert len(built) == 3
        assert built[0].close.called and built[1].close.called
        assert rebuilt is built[2]
