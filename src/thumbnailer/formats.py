"""Image type inference from blob names."""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Final

from .exceptions import UnresolvableNameError, UnsupportedFormatError

DEFAULT_DESTINATION_PREFIX: Final[str] = "resized-"

_TYPE_PATTERN: Final[re.Pattern[str]] = re.compile(r".*\.([^.]*)")


class SupportedFormat(StrEnum):
    """Extensions accepted for thumbnailing."""

    JPG = "jpg"
    PNG = "png"

    @property
    def pil_format(self) -> str:
        return _PIL_FORMATS[self]

    @property
    def content_type(self) -> str:
        return _CONTENT_TYPES[self]


_PIL_FORMATS: Final[dict[SupportedFormat, str]] = {
    SupportedFormat.JPG: "JPEG",
    SupportedFormat.PNG: "PNG",
}
_CONTENT_TYPES: Final[dict[SupportedFormat, str]] = {
    SupportedFormat.JPG: "image/jpeg",
    SupportedFormat.PNG: "image/png",
}


def infer_image_type(name: str) -> str | None:
    """Return the token after the last ``.`` in *name*, or ``None``.

    The token is returned verbatim: no case folding, and a trailing dot
    yields an empty string.
    """

    match = _TYPE_PATTERN.fullmatch(name)
    if match is None:
        return None
    return match.group(1)


def resolve_format(name: str) -> SupportedFormat:
    """Map a blob name onto a :class:`SupportedFormat`.

    Raises:
        UnresolvableNameError: If the name has no extension separator.
        UnsupportedFormatError: If the extension is not exactly ``jpg`` or ``png``.
    """

    image_type = infer_image_type(name)
    if image_type is None:
        raise UnresolvableNameError(f"Unable to infer image type for key {name}")
    try:
        return SupportedFormat(image_type)
    except ValueError as exc:
        raise UnsupportedFormatError(f"Skipping non-image {name}") from exc


def destination_key(name: str, prefix: str = DEFAULT_DESTINATION_PREFIX) -> str:
    return f"{prefix}{name}"


__all__ = [
    "DEFAULT_DESTINATION_PREFIX",
    "SupportedFormat",
    "destination_key",
    "infer_image_type",
    "resolve_format",
]
