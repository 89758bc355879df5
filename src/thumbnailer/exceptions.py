"""Exceptions raised across the thumbnailer package."""

from __future__ import annotations


class ThumbnailerError(RuntimeError):
    """Base error for thumbnailer failures."""


class UnresolvableNameError(ThumbnailerError):
    """Raised when a blob name carries no extension to infer a type from."""


class UnsupportedFormatError(ThumbnailerError):
    """Raised when a blob extension is not one of the accepted image types."""


class ImageProcessingError(ThumbnailerError):
    """Raised when thumbnail generation fails."""


class StorageError(ThumbnailerError):
    """Raised when blob storage interactions fail."""
