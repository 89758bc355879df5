"""Blob-triggered image thumbnailer."""

from .config import ThumbnailerSettings, get_settings
from .exceptions import (
    ImageProcessingError,
    StorageError,
    ThumbnailerError,
    UnresolvableNameError,
    UnsupportedFormatError,
)
from .formats import SupportedFormat, destination_key, infer_image_type, resolve_format
from .handler import ProcessingOutcome, ThumbnailHandler
from .images import compute_target_size, generate_thumbnail, resize_image
from .storage import InMemoryStorage, StorageClient

__all__ = (
    "ImageProcessingError",
    "InMemoryStorage",
    "ProcessingOutcome",
    "StorageClient",
    "StorageError",
    "SupportedFormat",
    "ThumbnailHandler",
    "ThumbnailerError",
    "ThumbnailerSettings",
    "UnresolvableNameError",
    "UnsupportedFormatError",
    "compute_target_size",
    "destination_key",
    "generate_thumbnail",
    "get_settings",
    "infer_image_type",
    "resize_image",
    "resolve_format",
)
