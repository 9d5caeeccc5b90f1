# printbay/schemas/files.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from printbay.schemas._base import APIModel as BaseModel


class FileUploadResponse(BaseModel):
    success: bool
    file_id: str = Field("", description="Empty string whenever the upload was rejected")
    upload_url: Optional[str] = Field(None, examples=["local://cache/2f1c..."])
    file_name: str = ""
    file_size: int = 0
    file_type: str = ""
    error: Optional[str] = None


class CachedFileMeta(BaseModel):
    id: str
    name: str
    size: int
    type: str
    uploaded_at: datetime
    last_accessed: datetime


class CachedFileData(CachedFileMeta):
    data: bytes
