"""
app/api/dependencies.py

Request-level dependencies for the report API.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import File, HTTPException, UploadFile, status

CSV_CONTENT_TYPES = frozenset(
    {
        "text/csv",
        "application/csv",
        "application/vnd.ms-excel",
    }
)

DEFAULT_UPLOAD_NAME = "upload.csv"


@dataclass(frozen=True)
class CSVUpload:
    file_name: str
    content: bytes


def read_csv_upload(file: UploadFile = File(...)) -> CSVUpload:
    """
    Accept a CSV upload by extension or MIME type and read it fully.

    Raises 400 for other file types and for empty uploads.
    """

    file_name = (file.filename or "").strip() or DEFAULT_UPLOAD_NAME
    content_type = (file.content_type or "").strip().lower()
    if not file_name.lower().endswith(".csv") and content_type not in CSV_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV files are allowed.",
        )

    try:
        content = file.file.read()
    finally:
        file.file.close()

    if not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is empty.",
        )
    return CSVUpload(file_name=file_name, content=content)
