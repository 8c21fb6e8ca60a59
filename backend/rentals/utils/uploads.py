import base64
import binascii
import os
import re
import uuid

from flask import current_app

from rentals.utils.errors import ApiError

DATA_URL_RE = re.compile(r"^data:image/([a-zA-Z]+);base64,(.+)$", re.DOTALL)
ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}
PROPERTIES_SUBDIR = "properties"


def public_url(image_path: str | None) -> str | None:
    """Absolute URL for a stored image; external URLs pass through."""
    if not image_path:
        return None
    if image_path.startswith("/uploads/"):
        base = (current_app.config.get("PUBLIC_BASE_URL") or "").rstrip("/")
        return f"{base}{image_path}"
    return image_path


def decode_data_url(data_url: str) -> tuple[str, bytes]:
    match = DATA_URL_RE.match(data_url or "")
    if not match:
        raise ApiError("Invalid image format", 400)

    ext = match.group(1).lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise ApiError("Invalid image format. Allowed: jpg, jpeg, png, gif, webp.", 400)

    try:
        content = base64.b64decode(match.group(2), validate=True)
    except (binascii.Error, ValueError):
        raise ApiError("Invalid image format", 400)

    return ext, content


def save_data_url(data_url: str) -> str:
    """Write a base64 data URL under UPLOADS_DIR and return its ``/uploads/...`` path."""
    ext, content = decode_data_url(data_url)

    upload_dir = current_app.config.get("UPLOADS_DIR")
    if not upload_dir:
        raise ApiError("Uploads directory not configured", 500)

    target_dir = os.path.join(upload_dir, PROPERTIES_SUBDIR)
    os.makedirs(target_dir, exist_ok=True)

    filename = f"{uuid.uuid4().hex}.{ext}"
    with open(os.path.join(target_dir, filename), "wb") as out:
        out.write(content)

    current_app.logger.info("[uploads] stored %s (%s bytes)", filename, len(content))
    return f"/uploads/{PROPERTIES_SUBDIR}/{filename}"


def remove_upload(image_path: str | None) -> None:
    """Delete the file behind an ``/uploads/...`` path, if it is still there."""
    prefix = f"/uploads/{PROPERTIES_SUBDIR}/"
    if not image_path or not image_path.startswith(prefix):
        return
    upload_dir = current_app.config.get("UPLOADS_DIR")
    if not upload_dir:
        return
    file_path = os.path.join(upload_dir, PROPERTIES_SUBDIR, os.path.basename(image_path))
    if os.path.isfile(file_path):
        os.remove(file_path)
