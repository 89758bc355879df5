from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Protocol, cast

from .exceptions import StorageError

if TYPE_CHECKING:
    from .config import ThumbnailerSettings


class StorageClient(Protocol):
    async def download(self, container: str, key: str) -> bytes: ...

    async def upload(
        self, container: str, key: str, data: bytes, content_type: str
    ) -> str: ...

    async def close(self) -> None: ...


class BlobClientLike(Protocol):
    url: str

    def download_blob(self) -> Any: ...

    def upload_blob(self, data: bytes, **kwargs: Any) -> Any: ...


class BlobServiceLike(Protocol):
    def get_blob_client(self, container: str, blob: str) -> BlobClientLike: ...

    def close(self) -> None: ...


class OutputLike(Protocol):
    def set(self, val: bytes) -> None: ...


class AzureBlobStorage(StorageClient):
    """Async-friendly wrapper around the Azure Blob Storage client."""

    def __init__(self, client: BlobServiceLike) -> None:
        self._client: BlobServiceLike = client

    @classmethod
    def from_settings(cls, settings: ThumbnailerSettings) -> AzureBlobStorage:
        if not settings.azure_storage_connection_string:
            raise StorageError(
                f"{settings.storage_connection_setting} connection string is not configured"
            )
        from azure.storage.blob import BlobServiceClient

        client = cast(
            BlobServiceLike,
            BlobServiceClient.from_connection_string(
                settings.azure_storage_connection_string
            ),
        )
        return cls(client)

    async def download(self, container: str, key: str) -> bytes:
        def _download() -> bytes:
            blob = self._client.get_blob_client(container=container, blob=key)
            return cast(bytes, blob.download_blob().readall())

        try:
            return await asyncio.to_thread(_download)
        except Exception as exc:  # pragma: no cover - network errors
            raise StorageError(str(exc)) from exc

    async def upload(
        self, container: str, key: str, data: bytes, content_type: str
    ) -> str:
        from azure.storage.blob import ContentSettings

        def _upload() -> str:
            blob = self._client.get_blob_client(container=container, blob=key)
            blob.upload_blob(
                data,
                overwrite=True,
                content_settings=ContentSettings(content_type=content_type),
            )
            return blob.url

        try:
            return await asyncio.to_thread(_upload)
        except Exception as exc:
            raise StorageError(str(exc)) from exc

    async def close(self) -> None:
        await asyncio.to_thread(self._client.close)


class OutputBindingStorage(StorageClient):
    """Write-only storage backed by a Functions blob output binding.

    The binding's path is fixed when the function is registered, so ``key``
    only shows up in the returned URI.
    """

    def __init__(self, output: OutputLike) -> None:
        self._output = output

    async def download(self, container: str, key: str) -> bytes:
        raise StorageError("output bindings are write-only")

    async def upload(
        self, container: str, key: str, data: bytes, content_type: str
    ) -> str:
        try:
            self._output.set(bytes(data))
        except Exception as exc:
            raise StorageError(str(exc)) from exc
        return f"{container}/{key}"

    async def close(self) -> None:
        return None


class InMemoryStorage(StorageClient):
    """Simple in-memory storage used in tests and local runs."""

    def __init__(self) -> None:
        self._objects: dict[str, bytes] = {}
        self._content_types: dict[str, str] = {}

    async def download(self, container: str, key: str) -> bytes:
        try:
            return self._objects[f"{container}/{key}"]
        except KeyError as exc:
            raise StorageError("object not found") from exc

    async def upload(
        self, container: str, key: str, data: bytes, content_type: str
    ) -> str:
        path = f"{container}/{key}"
        self._objects[path] = bytes(data)
        self._content_types[path] = content_type
        return f"memory://{path}"

    async def close(self) -> None:
        return None

    def content_type(self, container: str, key: str) -> str | None:
        return self._content_types.get(f"{container}/{key}")


def build_storage(settings: ThumbnailerSettings) -> StorageClient:
    """Instantiate the storage backend named by ``settings.storage_backend``."""

    if settings.storage_backend == "azure":
        return AzureBlobStorage.from_settings(settings)
    return InMemoryStorage()
