"""
AdCarbon — Upload helpers shared by the routes.
"""
from fastapi import UploadFile

from adcarbon.schemas.schemas import ImageUpload


async def read_upload(file: UploadFile) -> ImageUpload:
    content = await file.read()
    return ImageUpload(
        filename=file.filename or "",
        content_type=file.content_type or "",
        data=content,
    )
