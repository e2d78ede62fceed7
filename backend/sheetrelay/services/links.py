"""
SheetRelay Backend — Drive Link Conversion
============================================

What:  Turns Google Drive "view" links into direct image URLs.
Why:   A Drive share link (https://drive.google.com/file/d/<ID>/view?usp=...)
       opens the Drive viewer page; an <img> tag needs the raw image.
How:   Extract the file ID between "/d/" and "/view" and build an
       lh3.googleusercontent.com URL sized to 500px wide.
"""

import re
from typing import Any, List, Optional

DIRECT_IMAGE_URL = "https://lh3.googleusercontent.com/d/{file_id}=w500"

_DRIVE_VIEW_LINK = re.compile(r"/d/(.+?)/view")


def extract_drive_file_id(url: str) -> Optional[str]:
    match = _DRIVE_VIEW_LINK.search(url)
    return match.group(1) if match else None


def to_direct_image_url(url: Optional[Any]) -> str:
    """
    Convert a Drive view link to a direct image link.

    Examples:
        ".../file/d/abc123/view?usp=sharing" → "https://lh3.googleusercontent.com/d/abc123=w500"
        "https://example.com/cat.png"        → unchanged
        "" or None                           → ""
    """
    if not url:
        return ""
    text = str(url)
    file_id = extract_drive_file_id(text)
    if file_id is None:
        return text
    return DIRECT_IMAGE_URL.format(file_id=file_id)


def rewrite_picture_column(rows: List[List[Any]], column: int) -> List[List[Any]]:
    """
    Return a copy of `rows` with the picture column converted in place.

    Rows too short to reach the column are left as-is; the Sheets API trims
    trailing empty cells, so a row without a picture simply ends earlier.
    """
    rewritten = []
    for row in rows:
        if len(row) > column:
            row = list(row)
            row[column] = to_direct_image_url(row[column])
        rewritten.append(row)
    return rewritten
