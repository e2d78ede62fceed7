"""
SheetRelay Backend — Sheet Column Layouts
===========================================

What:  Named-column schemas describing where each field lives in a sheet row.
Why:   Handlers never hard-code column letters; they ask the layout. A column
       moved in the sheet is a one-line change here instead of a silent
       positional drift across every endpoint.
How:   `SheetLayout` is a frozen dataclass; two module constants cover the
       supported deployments and `get_layout()` picks one by name.

Layouts:
    generic:  A=id (millisecond timestamp)  B=text
    product:  A=sku  B=size  C=code  D=productName  E=smer
              F=smerUpdatedPrice  G=kgaPrice  H,I=(unmapped)
              J=pictureUrl  K=shopLink  L=lazadaLink  M=tiktokLink
"""

from dataclasses import dataclass
from typing import Optional, Tuple


def column_letter(index: int) -> str:
    """Convert a 0-based column index to its A1 letter (0 → A, 25 → Z, 26 → AA)."""
    if index < 0:
        raise ValueError(f"Column index must be non-negative, got {index}")
    letters = ""
    index += 1
    while index:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def a1_range(sheet: str, cells: str) -> str:
    """
    Build a sheet-qualified A1 range.

    The title is always single-quoted, with embedded quotes doubled. An
    unquoted title that looks like a cell reference ("A1", "R1C1") would be
    misread by the Sheets API: ("My Sheet", "A:B") → 'My Sheet'!A:B
    """
    escaped = sheet.replace("'", "''")
    return f"'{escaped}'!{cells}"


@dataclass(frozen=True)
class SheetLayout:
    """
    Column schema for one deployment.

    Attributes:
        name:           Layout identifier used in configuration
        columns:        Field name per column, starting at A. None marks a
                        column the service never writes.
        key_field:      Field holding the record identifier (always column A)
        edit_field:     Field overwritten by POST /edit
        picture_field:  Field holding the image URL, if the layout has one
        required:       Fields that must be non-empty on append
        read_range:     Default cell span for GET /data
        auto_key:       Key is generated on append (millisecond timestamp)
    """

    name: str
    columns: Tuple[Optional[str], ...]
    key_field: str
    edit_field: str
    picture_field: Optional[str]
    required: Tuple[str, ...]
    read_range: str
    auto_key: bool = False

    def index_of(self, field: str) -> int:
        try:
            return self.columns.index(field)
        except ValueError:
            raise KeyError(f"Layout '{self.name}' has no column named '{field}'") from None

    def letter_of(self, field: str) -> str:
        return column_letter(self.index_of(field))

    @property
    def key_letter(self) -> str:
        return self.letter_of(self.key_field)

    @property
    def picture_index(self) -> Optional[int]:
        if self.picture_field is None:
            return None
        return self.index_of(self.picture_field)

    @property
    def last_letter(self) -> str:
        return column_letter(len(self.columns) - 1)

    def key_range(self, through: Optional[str] = None) -> str:
        """
        Span from the key column to `through` (inclusive), whole-column.

        key_range() → "A:A", key_range("text") → "A:B"
        """
        end = self.key_letter if through is None else self.letter_of(through)
        return f"{self.key_letter}:{end}"

    def build_row(self, values: dict) -> list:
        """Lay out a field → value mapping as a full row; unmapped columns are empty."""
        row = []
        for field in self.columns:
            value = None if field is None else values.get(field)
            row.append("" if value is None else value)
        return row


GENERIC_LAYOUT = SheetLayout(
    name="generic",
    columns=("id", "text"),
    key_field="id",
    edit_field="text",
    picture_field=None,
    required=("text",),
    read_range="A:B",
    auto_key=True,
)

PRODUCT_LAYOUT = SheetLayout(
    name="product",
    columns=(
        "sku",               # A
        "size",              # B
        "code",              # C
        "productName",       # D
        "smer",              # E
        "smerUpdatedPrice",  # F
        "kgaPrice",          # G
        None,                # H (sheet-owned)
        None,                # I (sheet-owned)
        "pictureUrl",        # J
        "shopLink",          # K
        "lazadaLink",        # L
        "tiktokLink",        # M
    ),
    key_field="sku",
    edit_field="size",
    picture_field="pictureUrl",
    required=("sheet", "sku", "productName"),
    read_range="A1:M",
)

LAYOUTS = {layout.name: layout for layout in (GENERIC_LAYOUT, PRODUCT_LAYOUT)}


def get_layout(name: str) -> SheetLayout:
    try:
        return LAYOUTS[name]
    except KeyError:
        raise ValueError(
            f"Unknown sheet layout '{name}'. Must be one of: {sorted(LAYOUTS)}"
        ) from None
