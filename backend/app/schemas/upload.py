"""
WellNest Backend — Upload Schemas
"""

from datetime import datetime

from pydantic import BaseModel, Field


class UploadResult(BaseModel):
    """
    What:  Metadata about a stored image, returned by the upload endpoints.

    Example:
        {
            "filename": "image-1718000000000-a1b2c3d4e5f6.jpg",
            "filePath": "/uploads/image-1718000000000-a1b2c3d4e5f6.jpg",
            "originalName": "yoga-class.jpg",
            "size": 48213,
            "mimetype": "image/jpeg"
        }
    """
    filename: str
    filePath: str
    originalName: str
    size: int
    mimetype: str


class UploadResponse(BaseModel):
    success: bool = True
    message: str = "Image uploaded successfully"
    data: UploadResult


class ImageInfo(BaseModel):
    filename: str
    size: int = Field(description="Bytes on disk")
    created: datetime
    modified: datetime
    filePath: str


class ImageInfoResponse(BaseModel):
    success: bool = True
    data: ImageInfo
