"""
SheetRelay Backend — FastAPI Dependencies
===========================================

What:  Providers that hand route handlers their service instances.
Why:   Routes depend on these functions rather than importing singletons,
       so tests swap in fakes through app.dependency_overrides.
"""

from sheetrelay.services.drive_storage import drive_storage
from sheetrelay.services.record_service import RecordService, record_service
from sheetrelay.services.storage_base import ImageStorage


def get_record_service() -> RecordService:
    return record_service


def get_image_storage() -> ImageStorage:
    return drive_storage
