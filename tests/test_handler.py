from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from thumbnailer.config import ThumbnailerSettings
from thumbnailer.exceptions import StorageError
from thumbnailer.handler import ThumbnailHandler
from thumbnailer.storage import InMemoryStorage

from .factories import decode, image_bytes


class _FailingStorage(InMemoryStorage):
    async def upload(
        self, container: str, key: str, data: bytes, content_type: str
    ) -> str:
        raise StorageError("upload rejected")


class _RecordingStorage(InMemoryStorage):
    def __init__(self) -> None:
        super().__init__()
        self.upload_calls = 0

    async def upload(
        self, container: str, key: str, data: bytes, content_type: str
    ) -> str:
        self.upload_calls += 1
        return await super().upload(container, key, data, content_type)


@pytest.mark.asyncio
async def test_process_resizes_jpeg_and_uploads_with_prefix(
    handler: ThumbnailHandler, storage: InMemoryStorage
) -> None:
    source = image_bytes((400, 200), image_format="JPEG")

    with capture_logs() as logs:
        outcome = await handler.process("photo.jpg", source)

    assert outcome.status == "succeeded"
    assert outcome.details["destination"] == "resized-photo.jpg"
    assert outcome.details["format"] == "jpg"
    stored = await storage.download("output-container", "resized-photo.jpg")
    thumb = decode(stored)
    assert thumb.size == (100, 50)
    assert thumb.format == "JPEG"
    assert storage.content_type("output-container", "resized-photo.jpg") == "image/jpeg"

    uploaded = [entry for entry in logs if entry["event"] == "thumbnail-uploaded"]
    assert uploaded == [
        {
            "event": "thumbnail-uploaded",
            "log_level": "info",
            "blob": "photo.jpg",
            "source": "input-container/photo.jpg",
            "destination": "output-container/resized-photo.jpg",
        }
    ]


@pytest.mark.asyncio
async def test_process_upscales_small_png(
    handler: ThumbnailHandler, storage: InMemoryStorage
) -> None:
    source = image_bytes((50, 50), mode="RGBA", color=(0, 0, 0, 0))

    outcome = await handler.process("icons/dot.png", source)

    assert outcome.status == "succeeded"
    thumb = decode(await storage.download("output-container", "resized-icons/dot.png"))
    assert thumb.size == (100, 100)
    assert thumb.format == "PNG"


@pytest.mark.asyncio
async def test_process_skips_name_without_extension(
    settings: ThumbnailerSettings,
) -> None:
    storage = _RecordingStorage()
    handler = ThumbnailHandler(storage, settings)

    with capture_logs() as logs:
        outcome = await handler.process("noext", image_bytes((10, 10)))

    assert outcome.status == "unresolvable"
    assert storage.upload_calls == 0
    assert [(entry["event"], entry["log_level"]) for entry in logs] == [
        ("image-type-unresolvable", "info")
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["archive.zip", "photo.jpeg", "photo.JPG"])
async def test_process_skips_unsupported_extension(
    settings: ThumbnailerSettings, name: str
) -> None:
    storage = _RecordingStorage()
    handler = ThumbnailHandler(storage, settings)

    with capture_logs() as logs:
        outcome = await handler.process(name, image_bytes((10, 10)))

    assert outcome.status == "skipped"
    assert storage.upload_calls == 0
    assert [(entry["event"], entry["log_level"]) for entry in logs] == [
        ("non-image-skipped", "info")
    ]


@pytest.mark.asyncio
async def test_process_logs_and_returns_on_decode_failure(
    settings: ThumbnailerSettings,
) -> None:
    storage = _RecordingStorage()
    handler = ThumbnailHandler(storage, settings)

    with capture_logs() as logs:
        outcome = await handler.process("broken.png", b"not a png")

    assert outcome.status == "failed"
    assert outcome.details == {"blob": "broken.png", "error": "image-processing-error"}
    assert storage.upload_calls == 0
    (failure,) = [entry for entry in logs if entry["log_level"] == "error"]
    assert failure["event"] == "thumbnail-processing-failed"
    assert failure["error"] == "image-processing-error"


@pytest.mark.asyncio
async def test_process_logs_and_returns_on_upload_failure(
    settings: ThumbnailerSettings,
) -> None:
    handler = ThumbnailHandler(_FailingStorage(), settings)

    with capture_logs() as logs:
        outcome = await handler.process("photo.png", image_bytes((200, 200)))

    assert outcome.status == "failed"
    assert outcome.details["error"] == "storage-error"
    events = [entry["event"] for entry in logs]
    assert "thumbnail-writing" in events
    assert "thumbnail-uploaded" not in events


@pytest.mark.asyncio
async def test_process_uses_configured_box_and_prefix(storage: InMemoryStorage) -> None:
    settings = ThumbnailerSettings(
        _env_file=None,
        storage_backend="memory",
        max_dimension=40,
        output_container="thumbs",
        destination_prefix="small-",
    )
    handler = ThumbnailHandler(storage, settings)

    outcome = await handler.process("photo.png", image_bytes((400, 200)))

    assert outcome.status == "succeeded"
    thumb = decode(await storage.download("thumbs", "small-photo.png"))
    assert thumb.size == (40, 20)


@pytest.mark.asyncio
async def test_reprocess_reads_source_from_input_container(
    handler: ThumbnailHandler, storage: InMemoryStorage
) -> None:
    await storage.upload(
        "input-container", "photo.png", image_bytes((300, 150)), "image/png"
    )

    outcome = await handler.reprocess("photo.png")

    assert outcome.status == "succeeded"
    thumb = decode(await storage.download("output-container", "resized-photo.png"))
    assert thumb.size == (100, 50)


@pytest.mark.asyncio
async def test_reprocess_missing_source_fails_softly(handler: ThumbnailHandler) -> None:
    with capture_logs() as logs:
        outcome = await handler.reprocess("missing.png")

    assert outcome.status == "failed"
    assert outcome.details == {"blob": "missing.png", "error": "storage-error"}
    (failure,) = [entry for entry in logs if entry["log_level"] == "error"]
    assert failure["event"] == "thumbnail-processing-failed"
    assert failure["error"] == outcome.details["error"]


def test_run_wraps_process_synchronously(
    handler: ThumbnailHandler, storage: InMemoryStorage
) -> None:
    outcome = handler.run("photo.png", image_bytes((100, 400)))

    assert outcome.status == "succeeded"
    assert outcome.details["destination"] == "resized-photo.png"
