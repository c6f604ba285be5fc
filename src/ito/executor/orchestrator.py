"""Batch orchestration: one decode, many independent transforms.

The source is decoded once. Each transform then drives its own pipeline
handle through step composition and format dispatch in a separate
asyncio task, so transforms run concurrently and a failure in one never
affects the others.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from ito.engine.pipeline import ImagePipeline, SourceImage, describe_source
from ito.exceptions import DecodeError
from ito.executor.dispatch import FormatDispatcher, ProcessOptions
from ito.logging.context import transform_context
from ito.transform.steps import compose_pipeline
from ito.transform.types import TransformOutcome, TransformRequest

logger = logging.getLogger(__name__)


async def open_source(
    source: SourceImage, *, strip_metadata: bool = False
) -> ImagePipeline:
    """Decode a source into a base pipeline.

    Raises:
        DecodeError: If the source is unreadable or corrupt.
    """
    with transform_context(describe_source(source)):
        try:
            return await ImagePipeline.open(source, keep_metadata=not strip_metadata)
        except DecodeError as e:
            logger.error("%s", e)
            raise


async def run_transform(
    pipeline: ImagePipeline,
    request: TransformRequest,
    dispatcher: FormatDispatcher,
) -> TransformRequest:
    """Compose and encode one transform on a pipeline it owns."""
    with transform_context(pipeline.source, request.output_path):
        logger.debug("Start processing %s", request.output_path)
        compose_pipeline(
            pipeline, request.args, use_mozjpeg=dispatcher.options.use_mozjpeg
        )
        result = await dispatcher.dispatch(pipeline, request)
        logger.debug("Finished processing %s", request.output_path)
        return result


async def process_file(
    source: SourceImage,
    transforms: Iterable[TransformRequest],
    options: ProcessOptions | None = None,
    *,
    dispatcher: FormatDispatcher | None = None,
) -> list[asyncio.Task[TransformRequest]]:
    """Decode a source and start every transform.

    Args:
        source: Image file path or encoded bytes.
        transforms: Requested outputs. Output paths should be unique.
        options: Batch options (metadata policy, MozJPEG mode).
        dispatcher: Dispatcher to use; built from options when None.

    Returns:
        One task per transform, in request order. Each resolves to the
        echoed request or raises that transform's error. Tasks may finish
        in any order.

    Raises:
        DecodeError: If the source cannot be decoded. No task is started.
    """
    options = options or ProcessOptions()
    requests = list(transforms)
    base = await open_source(source, strip_metadata=options.strip_metadata)
    dispatcher = dispatcher or FormatDispatcher(options)

    # Every transform owns a handle; clones are taken before any task runs,
    # so the last transform can safely take the base itself.
    handles = [base.clone() for _ in requests[:-1]]
    if requests:
        handles.append(base)

    return [
        asyncio.create_task(
            run_transform(handle, request, dispatcher),
            name=f"ito:{request.output_path}",
        )
        for handle, request in zip(handles, requests)
    ]


async def process_batch(
    source: SourceImage,
    transforms: Iterable[TransformRequest],
    options: ProcessOptions | None = None,
    *,
    dispatcher: FormatDispatcher | None = None,
) -> list[TransformOutcome]:
    """Run every transform of a batch and collect per-transform outcomes.

    Returns:
        Outcomes in request order. Failed transforms carry their error;
        they never prevent sibling transforms from completing.

    Raises:
        DecodeError: If the source cannot be decoded.
    """
    requests = list(transforms)
    tasks = await process_file(source, requests, options, dispatcher=dispatcher)
    results = await asyncio.gather(*tasks, return_exceptions=True)

    outcomes: list[TransformOutcome] = []
    for request, result in zip(requests, results):
        if isinstance(result, Exception):
            logger.warning("Transform %s failed: %s", request.output_path, result)
            outcomes.append(TransformOutcome(request, error=result))
        elif isinstance(result, BaseException):
            raise result
        else:
            outcomes.append(TransformOutcome(result))

    failed = sum(1 for outcome in outcomes if not outcome.ok)
    logger.info(
        "Processed %s: %d succeeded, %d failed",
        describe_source(source),
        len(outcomes) - failed,
        failed,
    )
    return outcomes
