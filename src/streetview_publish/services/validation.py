"""Local precondition checks for configuration, photos and metadata.

Every check here runs before any remote call for the step it guards.
"""

import math
import os
import re
from collections.abc import Mapping
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path

from dateutil import parser as date_parser
from PIL import Image, UnidentifiedImageError
from pydantic import TypeAdapter, ValidationError

from streetview_publish.domain.errors import ConfigError, MetadataError, PhotoError
from streetview_publish.domain.uploads import (
    MIN_HEIGHT,
    MIN_WIDTH,
    Configuration,
    PhotoSource,
    PoseMetadata,
)

_MIME_BY_FORMAT = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "MPO": "image/jpeg",
}

_LATITUDE_PATTERN = re.compile(
    r"^[+-]?(?:90(?:\.0{1,6})?|(?:[0-9]|[1-8][0-9])(?:\.[0-9]{1,6})?)$"
)
_LONGITUDE_PATTERN = re.compile(
    r"^[+-]?(?:180(?:\.0{1,6})?|(?:[0-9]|[1-9][0-9]|1[0-7][0-9])(?:\.[0-9]{1,6})?)$"
)
_HEADING_PATTERN = re.compile(
    r"^(?:[0-9]|[1-9][0-9]|[12][0-9]{2}|3[0-5][0-9])(?:\.[0-9]{1,6})?$"
)

_DATETIME_ADAPTER = TypeAdapter(datetime)


def validate_config(config: Mapping[str, object] | None) -> Configuration:
    """Return accepted credentials or raise ConfigError."""
    if not config:
        raise ConfigError("Your configuration cannot be empty.")
    api_key = config.get("api_key")
    if _is_blank(api_key) or not isinstance(api_key, str):
        raise ConfigError("You must include an API key.")
    access_token = config.get("access_token")
    if _is_blank(access_token) or not isinstance(access_token, str):
        raise ConfigError("You must include an OAuth access token.")
    return Configuration(api_key=api_key, access_token=access_token)


def validate_photo_source(path: str | os.PathLike[str]) -> PhotoSource:
    """Probe an image file and return it if it is a large enough PNG or JPEG."""
    file_path = Path(path)
    if not file_path.is_file() or not os.access(file_path, os.R_OK):
        raise PhotoError("Photo does not exist or is not readable.")

    try:
        with Image.open(file_path) as image:
            image_format = image.format
            width, height = image.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise PhotoError("Photo could not be decoded as an image.") from exc

    mime_type = _MIME_BY_FORMAT.get(image_format or "")
    if mime_type is None:
        raise PhotoError(f"Unsupported photo type: {image_format}.")
    if width < MIN_WIDTH or height < MIN_HEIGHT:
        raise PhotoError(
            "Image files must be at least 7.5 megapixels "
            f"({MIN_WIDTH}x{MIN_HEIGHT}), got {width}x{height}."
        )
    return PhotoSource(
        path=str(file_path),
        mime_type=mime_type,
        width=width,
        height=height,
    )


def validate_metadata(data: Mapping[str, object] | None) -> PoseMetadata:
    """Return normalized pose metadata or raise MetadataError."""
    if not data:
        raise MetadataError("Your photo metadata cannot be empty.")

    latitude = data.get("latitude")
    if _is_blank(latitude):
        raise MetadataError("You must set a latitude.")
    if not _matches(_LATITUDE_PATTERN, latitude):
        raise MetadataError("Invalid latitude.")

    longitude = data.get("longitude")
    if _is_blank(longitude):
        raise MetadataError("You must set a longitude.")
    if not _matches(_LONGITUDE_PATTERN, longitude):
        raise MetadataError("Invalid longitude.")

    heading = data.get("heading")
    if not _is_blank(heading) and not _matches(_HEADING_PATTERN, heading):
        raise MetadataError("Invalid heading.")

    created = data.get("created")
    if _is_blank(created):
        raise MetadataError("You must set a creation time in seconds.")
    captured_at = _to_epoch_seconds(created)
    if captured_at == 0:
        raise MetadataError("You must set a creation time in seconds.")

    return PoseMetadata(
        latitude=float(str(latitude)),
        longitude=float(str(longitude)),
        captured_at=captured_at,
        heading=None if _is_blank(heading) else float(str(heading)),
    )


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def _matches(pattern: re.Pattern[str], value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        return False
    text = _decimal_text(value) if isinstance(value, float) else str(value)
    return pattern.match(text.strip()) is not None


def _decimal_text(value: float) -> str:
    """Render a float without exponent notation, e.g. 1e-05 as 0.00001."""
    if not math.isfinite(value):
        return str(value)
    return format(Decimal(repr(value)), "f")


def _to_epoch_seconds(value: object) -> int:
    """Normalize a numeric or date/time value to integer epoch seconds."""
    if isinstance(value, bool):
        raise MetadataError("Invalid creation time.")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise MetadataError("Invalid creation time.")
        return int(value)
    if isinstance(value, datetime):
        return _timestamp(value)
    if not isinstance(value, str):
        raise MetadataError("Invalid creation time.")

    cleaned = value.strip()
    numeric = _parse_number(cleaned)
    if numeric is not None:
        return numeric
    try:
        return _timestamp(_DATETIME_ADAPTER.validate_python(cleaned))
    except ValidationError:
        pass
    try:
        parsed = date_parser.parse(cleaned)
    except (ValueError, OverflowError) as exc:
        raise MetadataError(f"Could not parse creation time: {value!r}.") from exc
    return _timestamp(parsed)


def _parse_number(text: str) -> int | None:
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number):
        raise MetadataError("Invalid creation time.")
    return int(number)


def _timestamp(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return int(value.timestamp())
