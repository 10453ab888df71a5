"""Field definitions for Google Drive API responses."""

from __future__ import annotations

FILE_FIELDS: str = (
    "id,"
    "name,"
    "mimeType,"
    "parents,"
    "trashed,"
    "modifiedTime,"
    "size,"
    "webViewLink,"
    "webContentLink,"
    "thumbnailLink"
)

LIST_FIELDS: str = f"nextPageToken,files({FILE_FIELDS})"

LIST_ORDER_BY: str = "folder,name"

# Listing is single-page; children beyond this bound are not fetched.
LIST_PAGE_SIZE: int = 1000
