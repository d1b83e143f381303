from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from app.platform.config import settings
from app.platform.exceptions import ValidationError

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif", ".avif", ".svg"}


def validate_image_file(file: UploadFile, field: str) -> None:
    """
    Reject anything that is not an image by content type or extension.

    Raises:
        ValidationError: with a field-level message for ``field``
    """
    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise ValidationError.for_field(field, "Only image files are allowed")

    file_ext = Path(file.filename or "").suffix.lower()
    if file_ext not in ALLOWED_EXTENSIONS:
        raise ValidationError.for_field(
            field,
            f"Invalid file type. Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}",
        )


async def read_image_upload(
    file: Optional[UploadFile], field: str, required: bool = True
) -> Optional[bytes]:
    """Validate an uploaded image and return its bytes, enforcing MAX_UPLOAD_SIZE."""
    if file is None or not file.filename:
        if required:
            raise ValidationError.for_field(field, "Image file is required")
        return None

    validate_image_file(file, field)

    contents = await file.read()
    if len(contents) > settings.MAX_UPLOAD_SIZE:
        raise ValidationError.for_field(
            field,
            f"File too large. Maximum size is {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB",
        )
    if not contents:
        raise ValidationError.for_field(field, "Uploaded file is empty")
    return contents
