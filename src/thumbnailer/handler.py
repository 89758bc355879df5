from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from .config import ThumbnailerSettings
from .exceptions import (
    ImageProcessingError,
    StorageError,
    UnresolvableNameError,
    UnsupportedFormatError,
)
from .formats import destination_key, resolve_format
from .images import generate_thumbnail
from .logging import get_logger
from .storage import StorageClient


@dataclass(slots=True)
class ProcessingOutcome:
    status: str
    details: dict[str, Any]


class ThumbnailHandler:
    """Resize a single uploaded blob and write the thumbnail to the output container.

    Per-blob faults never propagate: names that cannot be typed are skipped,
    decode and storage failures are logged and reported as a ``failed``
    outcome.
    """

    def __init__(self, storage: StorageClient, settings: ThumbnailerSettings) -> None:
        self._storage = storage
        self._settings = settings

    def run(self, name: str, content: bytes) -> ProcessingOutcome:
        return asyncio.run(self.process(name, content))

    async def process(self, name: str, content: bytes) -> ProcessingOutcome:
        log = get_logger(__name__).bind(blob=name)
        dst_key = destination_key(name, self._settings.destination_prefix)

        try:
            image_format = resolve_format(name)
        except UnresolvableNameError:
            log.info("image-type-unresolvable")
            return ProcessingOutcome(status="unresolvable", details={"blob": name})
        except UnsupportedFormatError:
            log.info("non-image-skipped")
            return ProcessingOutcome(status="skipped", details={"blob": name})

        try:
            thumbnail = generate_thumbnail(
                content,
                image_format,
                max_dimension=self._settings.max_dimension,
            )
            log.info(
                "thumbnail-writing",
                container=self._settings.output_container,
                destination=dst_key,
            )
            url = await self._storage.upload(
                self._settings.output_container,
                dst_key,
                thumbnail,
                image_format.content_type,
            )
        except Exception as exc:
            message = self._map_error(exc)
            log.error("thumbnail-processing-failed", error=message, exc_info=exc)
            return ProcessingOutcome(
                status="failed", details={"blob": name, "error": message}
            )

        log.info(
            "thumbnail-uploaded",
            source=f"{self._settings.input_container}/{name}",
            destination=f"{self._settings.output_container}/{dst_key}",
        )
        return ProcessingOutcome(
            status="succeeded",
            details={
                "blob": name,
                "destination": dst_key,
                "url": url,
                "format": image_format.value,
                "size": len(thumbnail),
            },
        )

    async def reprocess(self, name: str) -> ProcessingOutcome:
        """Fetch ``name`` from the input container and process it again."""

        try:
            content = await self._storage.download(self._settings.input_container, name)
        except StorageError as exc:
            message = self._map_error(exc)
            get_logger(__name__).error(
                "thumbnail-processing-failed", blob=name, error=message, exc_info=exc
            )
            return ProcessingOutcome(
                status="failed", details={"blob": name, "error": message}
            )
        return await self.process(name, content)

    def _map_error(self, exc: Exception) -> str:
        if isinstance(exc, ImageProcessingError):
            return "image-processing-error"
        if isinstance(exc, StorageError):
            return "storage-error"
        return "unexpected-error"
