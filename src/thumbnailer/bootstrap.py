from __future__ import annotations

import asyncio
from dataclasses import dataclass

from .config import ThumbnailerSettings, get_settings
from .handler import ThumbnailHandler
from .logging import configure_logging, get_logger
from .storage import StorageClient, build_storage


@dataclass(slots=True)
class RuntimeOverrides:
    """Optional dependency overrides used primarily for tests."""

    settings: ThumbnailerSettings | None = None
    storage: StorageClient | None = None
    log_level: str | None = None


@dataclass(slots=True)
class RuntimeState:
    settings: ThumbnailerSettings
    storage: StorageClient
    handler: ThumbnailHandler


_state: RuntimeState | None = None
_state_lock = asyncio.Lock()
_log = get_logger(__name__)


async def initialise(overrides: RuntimeOverrides | None = None) -> RuntimeState:
    global _state
    async with _state_lock:
        if _state is not None:
            return _state

        overrides = overrides or RuntimeOverrides()
        settings = overrides.settings or get_settings()
        configure_logging(overrides.log_level or settings.log_level)

        storage: StorageClient
        if overrides.storage is not None:
            storage = overrides.storage
        else:
            storage = build_storage(settings)

        _state = RuntimeState(
            settings=settings,
            storage=storage,
            handler=ThumbnailHandler(storage, settings),
        )
        _log.info(
            "thumbnailer-runtime-initialised",
            storage_backend=type(storage).__name__,
            max_dimension=settings.max_dimension,
        )
        return _state


async def shutdown() -> None:
    global _state
    async with _state_lock:
        if _state is None:
            return
        state = _state
        _state = None

        await state.storage.close()
        _log.info("thumbnailer-runtime-shutdown")


def get_runtime() -> RuntimeState:
    state = _state
    if state is None:
        raise RuntimeError("Thumbnailer runtime has not been initialised")
    return state
