"""
Gahoi Sathi — Photo processing.

Uploaded photos are decoded with Pillow, shrunk to fit inside
800×800 (never enlarged), stamped with a translucent application-name
watermark, and re-encoded as JPEG.
"""

from __future__ import annotations

import io

from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

from app.errors import ValidationError

MAX_DIMENSION = 800
JPEG_QUALITY = 85
MAX_UPLOAD_BYTES = 5 * 1024 * 1024
ALLOWED_CONTENT_TYPES = ("image/jpeg", "image/png", "image/webp")


def _load_font(size: int) -> ImageFont.ImageFont:
    try:
        return ImageFont.truetype("DejaVuSans-Bold.ttf", size)
    except OSError:
        return ImageFont.load_default()


def add_watermark(img: Image.Image, text: str) -> Image.Image:
    """Draw ``text`` centred over ``img`` at 60% white with a dark outline."""
    base = img.convert("RGBA")
    overlay = Image.new("RGBA", base.size, (255, 255, 255, 0))
    draw = ImageDraw.Draw(overlay)
    font = _load_font(max(12, min(base.size) // 10))

    left, top, right, bottom = draw.textbbox((0, 0), text, font=font, stroke_width=2)
    x = (base.width - (right - left)) / 2 - left
    y = (base.height - (bottom - top)) / 2 - top
    draw.text(
        (x, y),
        text,
        font=font,
        fill=(255, 255, 255, 153),
        stroke_width=2,
        stroke_fill=(0, 0, 0, 77),
    )
    return Image.alpha_composite(base, overlay).convert("RGB")


def process_photo(image_bytes: bytes, watermark: str | None = None) -> bytes:
    """Resize, watermark and JPEG-encode an uploaded image.

    Raises
    ------
    ValidationError
        If the payload is too large or is not a decodable image.
    """
    if len(image_bytes) > MAX_UPLOAD_BYTES:
        raise ValidationError("Photo exceeds the 5 MB upload limit")
    try:
        img = Image.open(io.BytesIO(image_bytes))
        img.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ValidationError("Uploaded file is not a valid image") from exc

    img = img.convert("RGB")
    # thumbnail() keeps aspect ratio and never enlarges
    img.thumbnail((MAX_DIMENSION, MAX_DIMENSION))
    if watermark:
        img = add_watermark(img, watermark)

    out = io.BytesIO()
    img.save(out, format="JPEG", quality=JPEG_QUALITY)
    return out.getvalue()
