"""
SheetRelay Backend — Application Package
==========================================

What: HTTP backend that proxies row CRUD and image uploads onto a Google
      Sheets spreadsheet, with Google Drive as the image host.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   RecordService / DriveImageStorage │  ← Validation, row lookup
    ├─────────────────────────────────────┤
    │     Layouts & Schemas (Data)        │  ← Column schema + Pydantic
    ├─────────────────────────────────────┤
    │      GoogleWorkspaceClient          │  ← Sheets v4 / Drive v3
    └─────────────────────────────────────┘

    The spreadsheet is the only store; the service keeps no state between
    requests.
"""

__version__ = "1.0.0"
