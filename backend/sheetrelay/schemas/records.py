"""
SheetRelay Backend — Pydantic Request/Response Schemas
========================================================

What:  Pydantic models defining the JSON contract of every endpoint.
Why:   Automatic parsing, serialization and OpenAPI docs.

Design Decision:
    Every request field is Optional at the schema level. "Required" is a
    business rule checked by RecordService, which raises ValidationError with
    a readable message (e.g. "ID and Text are required") and returns 400.
    Pydantic's own 422 would only say "field required" and would not let the
    layout decide which product fields are mandatory.

    JSON keys are camelCase (productName, pictureUrl) to match existing
    frontends; Python attributes are snake_case via aliases.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# A single spreadsheet cell as sent by clients
CellValue = Union[str, int, float]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class AddRowRequest(_CamelModel):
    """
    Body of POST /add.

    generic layout:  {"text": "..."} (sheet optional)
    product layout:  {"sheet", "sku", "size", "code", "productName", "smer",
                      "smerUpdatedPrice", "kgaPrice", "pictureUrl", "shopLink",
                      "lazadaLink", "tiktokLink"}
    """
    sheet: Optional[str] = Field(default=None, description="Target sheet name")
    text: Optional[CellValue] = Field(default=None, description="Row text (generic layout)")

    sku: Optional[CellValue] = None
    size: Optional[CellValue] = None
    code: Optional[CellValue] = None
    product_name: Optional[CellValue] = Field(default=None, alias="productName")
    smer: Optional[CellValue] = None
    smer_updated_price: Optional[CellValue] = Field(default=None, alias="smerUpdatedPrice")
    kga_price: Optional[CellValue] = Field(default=None, alias="kgaPrice")
    picture_url: Optional[CellValue] = Field(default=None, alias="pictureUrl")
    shop_link: Optional[CellValue] = Field(default=None, alias="shopLink")
    lazada_link: Optional[CellValue] = Field(default=None, alias="lazadaLink")
    tiktok_link: Optional[CellValue] = Field(default=None, alias="tiktokLink")

    def fields_by_column_name(self) -> Dict[str, Any]:
        """Field values keyed by their JSON (= layout column) names."""
        return self.model_dump(by_alias=True)


class EditRowRequest(_CamelModel):
    """Body of POST /edit. `sheet` falls back to DEFAULT_SHEET."""
    sheet: Optional[str] = None
    id: Optional[CellValue] = Field(default=None, description="Value in the key column")
    text: Optional[CellValue] = Field(default=None, description="New value for the edit column")


class DeleteRowRequest(_CamelModel):
    """Body of POST /delete."""
    sheet: Optional[str] = None
    sku: Optional[CellValue] = Field(default=None, description="Value in the key column")


class SaveImageLinkRequest(_CamelModel):
    """Body of POST /save-image-link."""
    sheet: Optional[str] = None
    sku: Optional[CellValue] = None
    picture_url: Optional[str] = Field(default=None, alias="pictureUrl")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class MessageResponse(BaseModel):
    """Confirmation returned by every write endpoint."""
    message: str = Field(description="Human-readable success message")
    data: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Raw Sheets API response (POST /add only)",
    )


class UploadResponse(_CamelModel):
    success: bool = True
    drive_link: str = Field(alias="driveLink", description="Drive view link of the stored image")


RowMatrix = List[List[Any]]


class ErrorResponse(BaseModel):
    """
    Standardized error body for all non-2xx responses.

    `error` holds the message itself (the raw Google API text on upstream
    failures), so clients reading `.error` get the reason, not a code.

    Example:
        {
            "error": "row with ID 'SKU-404' was not found",
            "code": "not_found",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Human-readable error message, raw upstream text on 500s")
    code: str = Field(description="Machine-readable error code")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    layout: str = Field(description="Active sheet layout")
    spreadsheet: str = Field(description="Spreadsheet reachability: connected, unreachable, not_configured")
    drive: str = Field(description="Image storage: configured, not_configured")
    uptime_seconds: float = Field(description="Seconds since service started")
