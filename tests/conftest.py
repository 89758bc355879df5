from __future__ import annotations

import pytest

from thumbnailer.config import ThumbnailerSettings
from thumbnailer.handler import ThumbnailHandler
from thumbnailer.storage import InMemoryStorage


@pytest.fixture
def settings() -> ThumbnailerSettings:
    return ThumbnailerSettings(_env_file=None, storage_backend="memory")


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def handler(storage: InMemoryStorage, settings: ThumbnailerSettings) -> ThumbnailHandler:
    return ThumbnailHandler(storage, settings)
