import io
from PIL import Image as PILImage, UnidentifiedImageError

from podshop.errors import InvalidAssetError


ALLOWED_FORMATS = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
}
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB
THUMBNAIL_SIZE = (400, 400)


def inspect_image(image_bytes):
    """Validate an uploaded design image and read its metadata.

    - Checks file size
    - Verifies it's a real image via Pillow
    - Restricts to print-ready formats

    Returns:
        dict with width, height, format, content_type and size

    Raises:
        InvalidAssetError on invalid input
    """
    if not image_bytes:
        raise InvalidAssetError("Empty design payload")
    if len(image_bytes) > MAX_FILE_SIZE:
        raise InvalidAssetError(
            f"Image too large: {len(image_bytes)} bytes (max {MAX_FILE_SIZE})"
        )

    try:
        img = PILImage.open(io.BytesIO(image_bytes))
        img.verify()  # verify it's a real image
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        raise InvalidAssetError("Invalid image file")

    # verify() leaves the image unusable, re-open for metadata
    img = PILImage.open(io.BytesIO(image_bytes))
    if img.format not in ALLOWED_FORMATS:
        raise InvalidAssetError(f"Unsupported image format: {img.format}")

    width, height = img.size
    return {
        "width": width,
        "height": height,
        "format": img.format,
        "content_type": ALLOWED_FORMATS[img.format],
        "size": len(image_bytes),
    }


def create_thumbnail(image_bytes, max_size=THUMBNAIL_SIZE):
    """Create a JPEG thumbnail for listings. Transparency goes on white."""
    img = PILImage.open(io.BytesIO(image_bytes))
    if img.mode in ("RGBA", "LA", "P"):
        img = img.convert("RGBA")
        background = PILImage.new("RGB", img.size, (255, 255, 255))
        background.paste(img, mask=img.split()[-1])
        img = background
    elif img.mode != "RGB":
        img = img.convert("RGB")
    img.thumbnail(max_size, PILImage.LANCZOS)
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=80)
    return buffer.getvalue()
