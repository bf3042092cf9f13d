"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from fastapi import File, HTTPException, UploadFile, status

from app.config import get_ingestion_settings


def get_forecast_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file has an accepted history/forecast extension.
    """

    filename = (file.filename or "").strip().lower()
    allowed = get_ingestion_settings().allowed_extensions
    if not filename.endswith(allowed):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Only {', '.join(allowed)} files are allowed.",
        )

    return file
