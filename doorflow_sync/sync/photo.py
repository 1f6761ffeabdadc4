"""
Member photo lookup and processing for DoorFlow synchronization.

Provides utilities for:
- Finding a member's photo file by name
- Image format validation and conversion
- Size optimization before upload
- Base64 encoding for the DoorFlow image_base64 field
"""

import base64
import io
import logging
from pathlib import Path
from typing import Optional

from PIL import Image

from doorflow_sync.sync.member import Member

# Photo processing configuration
MAX_PHOTO_SIZE = 2 * 1024 * 1024  # 2MB upload ceiling
MAX_PHOTO_DIMENSION = 1024  # pixels
JPEG_QUALITY = 85  # Balance between quality and file size

# Photo file extension looked up for each member
PHOTO_EXTENSION = ".png"

logger = logging.getLogger(__name__)


class PhotoError(Exception):
    """Raised when a photo operation fails."""

    pass


def photo_filename(member: Member) -> str:
    """
    File name of a member's photo: {firstname}_{lastname}.png, lower-cased.

    Example:
        >>> photo_filename(Member(id="m1", first_name="Alice", last_name="Smith"))
        'alice_smith.png'
    """
    return f"{member.first_name.lower()}_{member.last_name.lower()}{PHOTO_EXTENSION}"


def find_member_photo(member: Member, photo_dir: Optional[Path]) -> Optional[bytes]:
    """
    Read a member's photo, if one exists.

    Args:
        member: Member to look up
        photo_dir: Directory holding photo files, None disables lookup

    Returns:
        Raw image bytes, or None if there is no photo (not an error)
    """
    if photo_dir is None:
        return None

    path = Path(photo_dir) / photo_filename(member)
    try:
        data = path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.warning(f"Could not read photo {path}: {e}")
        return None

    logger.debug(f"Found photo for {member.display_name}: {path} ({len(data)} bytes)")
    return data or None


def process_photo(
    photo_data: bytes,
    max_size: int = MAX_PHOTO_SIZE,
    max_dimension: int = MAX_PHOTO_DIMENSION,
) -> bytes:
    """
    Validate a photo and convert it to a size-limited JPEG.

    Args:
        photo_data: Raw photo data as bytes
        max_size: Maximum file size in bytes (default: 2MB)
        max_dimension: Maximum width/height in pixels (default: 1024)

    Returns:
        Processed photo data as bytes in JPEG format

    Raises:
        PhotoError: If photo is invalid or processing fails
    """
    if not photo_data:
        raise PhotoError("Photo data cannot be empty")

    try:
        image = Image.open(io.BytesIO(photo_data))
        image.load()
    except Image.UnidentifiedImageError as e:
        raise PhotoError("Invalid or unsupported image format") from e
    except OSError as e:
        raise PhotoError(f"Failed to read image: {e}") from e

    # Convert to RGB if needed (handles RGBA, P, L, etc.)
    if image.mode not in ("RGB", "L"):
        if image.mode == "RGBA":
            # White background for transparency
            background = Image.new("RGB", image.size, (255, 255, 255))
            background.paste(image, mask=image.split()[3])
            image = background
        else:
            image = image.convert("RGB")

    width, height = image.size
    if width > max_dimension or height > max_dimension:
        if width > height:
            new_size = (max_dimension, max(1, int(height * (max_dimension / width))))
        else:
            new_size = (max(1, int(width * (max_dimension / height))), max_dimension)
        logger.debug(f"Resizing photo from {width}x{height} to {new_size[0]}x{new_size[1]}")
        image = image.resize(new_size, Image.Resampling.LANCZOS)

    quality = JPEG_QUALITY
    output_data = _save_jpeg(image, quality)

    # If still too large, reduce quality iteratively
    while len(output_data) > max_size and quality > 20:
        quality -= 5
        output_data = _save_jpeg(image, quality)

    if len(output_data) > max_size:
        raise PhotoError(
            f"Unable to reduce photo size below {max_size} bytes "
            f"(current: {len(output_data)} bytes)"
        )

    logger.debug(f"Processed photo: {len(photo_data)} -> {len(output_data)} bytes")
    return output_data


def _save_jpeg(image: Image.Image, quality: int) -> bytes:
    output = io.BytesIO()
    image.save(output, format="JPEG", quality=quality, optimize=True)
    return output.getvalue()


def encode_photo(photo_data: bytes) -> str:
    """Base64-encode photo bytes for the image_base64 field."""
    return base64.b64encode(photo_data).decode("ascii")


def load_member_photo_base64(member: Member, photo_dir: Optional[Path]) -> Optional[str]:
    """
    Find, process and encode a member's photo.

    A missing or unusable photo yields None; the sync carries on without it.

    Returns:
        Base64 JPEG data, or None
    """
    photo_data = find_member_photo(member, photo_dir)
    if photo_data is None:
        return None

    try:
        return encode_photo(process_photo(photo_data))
    except PhotoError as e:
        logger.warning(f"Skipping photo for {member.display_name}: {e}")
        return None
