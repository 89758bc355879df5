"""Azure Functions wiring for the blob thumbnailer."""

import azure.functions as func

from .bootstrap import RuntimeOverrides, initialise
from .config import ThumbnailerSettings, get_settings
from .handler import ProcessingOutcome, ThumbnailHandler
from .logging import bind_invocation_context, clear_invocation_context
from .storage import OutputBindingStorage


def blob_name(path: str, container: str) -> str:
    """Strip the ``container/`` prefix the trigger puts in front of blob names."""

    prefix = f"{container}/"
    if path.startswith(prefix):
        return path[len(prefix) :]
    return path


async def _handle(
    blob: func.InputStream,
    context: func.Context,
    settings: ThumbnailerSettings,
    output: func.Out[bytes] | None = None,
) -> ProcessingOutcome:
    runtime = await initialise(RuntimeOverrides(settings=settings))
    name = blob_name(blob.name or "", settings.input_container)

    handler = runtime.handler
    if output is not None:
        handler = ThumbnailHandler(OutputBindingStorage(output), settings)

    bind_invocation_context(invocation_id=context.invocation_id)
    try:
        return await handler.process(name, blob.read())
    finally:
        clear_invocation_context()


def create_app(settings: ThumbnailerSettings | None = None) -> func.FunctionApp:
    """Build the function app with one blob-triggered resize function.

    ``settings.output_binding`` selects between a declarative blob output
    binding and an imperative upload through the configured storage backend.
    """

    settings = settings or get_settings()
    app = func.FunctionApp()

    trigger = app.blob_trigger(
        arg_name="blob",
        path=f"{settings.input_container}/{{name}}",
        connection=settings.storage_connection_setting,
    )

    if settings.output_binding:

        @app.function_name(name="ImageResizeFunction")
        @trigger
        @app.blob_output(
            arg_name="resized",
            path=f"{settings.output_container}/{settings.destination_prefix}{{name}}",
            connection=settings.storage_connection_setting,
        )
        async def resize_with_binding(
            blob: func.InputStream, resized: func.Out[bytes], context: func.Context
        ) -> None:
            await _handle(blob, context, settings, output=resized)

    else:

        @app.function_name(name="ResizeImage")
        @trigger
        async def resize_image(blob: func.InputStream, context: func.Context) -> None:
            await _handle(blob, context, settings)

    return app
