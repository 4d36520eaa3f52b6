"""
Gahoi Sathi — Photos API

Upload (max three), delete and set-primary for the caller's own photos.
Indices refer to the display order returned by every endpoint.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_user_service
from app.database import get_db
from app.errors import ValidationError
from app.models.user import User
from app.schemas.user import PhotosResponse
from app.utils.images import ALLOWED_CONTENT_TYPES

logger = structlog.get_logger("sathi.api.photos")

router = APIRouter()


@router.post(
    "/upload",
    response_model=PhotosResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload profile photos",
)
async def upload_photos(
    photos: list[UploadFile] = File(..., description="One or more image files"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    log = logger.bind(user_id=str(current_user.id), file_count=len(photos))
    log.info("upload_photos_start")

    uploads: list[bytes] = []
    for upload in photos:
        if upload.content_type and upload.content_type not in ALLOWED_CONTENT_TYPES:
            raise ValidationError(f"Unsupported image type {upload.content_type}")
        uploads.append(await upload.read())

    result = await get_user_service().add_photos(current_user, uploads, db)
    log.info("upload_photos_complete", total_photos=len(result))
    return {"photos": result}


@router.delete("/{index}", response_model=PhotosResponse, summary="Delete a photo")
async def delete_photo(
    index: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return {"photos": await get_user_service().delete_photo(current_user, index, db)}


@router.put("/primary/{index}", response_model=PhotosResponse, summary="Set the primary photo")
async def set_primary_photo(
    index: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return {"photos": await get_user_service().set_primary_photo(current_user, index, db)}
