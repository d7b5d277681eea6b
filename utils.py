from fastapi import UploadFile

from dispatcher import ImageAttachment


def _clean_optional_text(value: str | None) -> str:
    if value is None:
        return ""
    cleaned = value.strip()
    if cleaned.lower() in {"", "none", "null", "undefined"}:
        return ""
    return cleaned


def read_upload(upload: UploadFile | None) -> ImageAttachment | None:
    if upload is None:
        return None
    data = upload.file.read()
    if not data:
        return None
    return ImageAttachment(data=data, mime_type=upload.content_type or "application/octet-stream")
