"""Image payload codec.

Images travel through the wizard as data URLs
(``data:image/png;base64,<payload>``). The model transport wants the bare
base64 payload, and the UI wants either the raw bytes or a PIL image, so this
module is the only place that knows about the framing.
"""

import base64
import binascii
import io
import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from .errors import MalformedAsset

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/png"
_SEPARATOR = ","
_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}

# Image types the model service accepts as inline data
SUPPORTED_MIME_TYPES = frozenset({"image/png", "image/jpeg", "image/webp"})
_FORMAT_ALIASES = {"MPO": "image/jpeg"}


def encode(data: bytes, mime_type: str = DEFAULT_MIME_TYPE) -> str:
    """Encode raw bytes as a self-describing data URL.

    Args:
        data: Binary image content
        mime_type: MIME marker written into the prefix

    Returns:
        Data URL string
    """
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def strip(text: str) -> str:
    """Remove the MIME-marker prefix, returning the raw base64 payload.

    Raises:
        MalformedAsset: If the payload separator is absent
    """
    if not text or _SEPARATOR not in text:
        raise MalformedAsset("Image data is missing its payload separator")
    return text.split(_SEPARATOR, 1)[1]


def mime_type_of(text: str) -> str:
    """Return the MIME marker of a data URL, or ``image/png`` if there is none."""
    if not text or not text.startswith("data:") or _SEPARATOR not in text:
        return DEFAULT_MIME_TYPE
    header = text[len("data:") : text.index(_SEPARATOR)]
    mime_type = header.split(";", 1)[0].strip()
    return mime_type or DEFAULT_MIME_TYPE


def decode(text: str) -> bytes:
    """Decode a data URL back into raw bytes.

    Raises:
        MalformedAsset: If the separator is missing or the payload is not base64
    """
    payload = strip(text)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedAsset(f"Image data is not valid base64: {e}") from e


def encode_image_file(path: str | Path) -> str:
    """Read an uploaded image file and encode it as a data URL.

    Pillow is used to confirm the file is an image and to find its MIME type.
    PNG, JPEG and WebP bytes are kept untouched; multi-picture JPEGs (MPO,
    common from phone cameras) are labelled ``image/jpeg``. Any other format
    is re-encoded to PNG, since the model service only accepts a few types.

    Raises:
        MalformedAsset: If the file cannot be read or is not an image
    """
    path = Path(path)
    try:
        data = path.read_bytes()
        with Image.open(io.BytesIO(data)) as img:
            image_format = img.format or ""
            mime_type = _FORMAT_ALIASES.get(image_format) or Image.MIME.get(image_format)
            if mime_type not in SUPPORTED_MIME_TYPES:
                logger.info(f"Converting {path.name} ({img.format}) to PNG")
                data = _to_png(img)
                mime_type = "image/png"
    except (OSError, UnidentifiedImageError) as e:
        raise MalformedAsset(f"Could not read image {path.name}: {e}") from e

    logger.debug(f"Encoded {path.name} ({mime_type}, {len(data)} bytes)")
    return encode(data, mime_type)


def _to_png(img: Image.Image) -> bytes:
    if img.mode not in ("RGB", "RGBA", "L", "LA"):
        img = img.convert("RGBA")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def to_pil(text: str) -> Image.Image:
    """Decode a data URL into a PIL image for display.

    Raises:
        MalformedAsset: If the payload is not a readable image
    """
    data = decode(text)
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (OSError, UnidentifiedImageError) as e:
        raise MalformedAsset(f"Image data could not be opened: {e}") from e
    return img


def extension_for(mime_type: str) -> str:
    """File extension (without dot) for a MIME type, ``png`` when unknown."""
    return _EXTENSIONS.get(mime_type, "png")
