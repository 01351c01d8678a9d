"""Execution front: blocking and worker-pool entry points over one render path.

Both entry points call `run_transform`, so they produce byte-identical
output for the same spec. The spec is cloned before any work starts; later
builder calls on the original do not affect a render already requested.
"""

from __future__ import annotations

import os
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable

from pixmill.constants import COPY_OUTPUT_ENV, PixelFormat
from pixmill.encoding import EncodingOptions, OutputTarget, encode, parse_target
from pixmill.logging_config import get_logger, log_duration
from pixmill.render import render_image
from pixmill.spec import TransformSpec

logger = get_logger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}

_executor: ThreadPoolExecutor | None = None
_executor_lock = threading.Lock()


@dataclass(frozen=True)
class ComputedImage:
    """Result of a render: output bytes plus the final dimensions."""

    buffer: bytes
    width: int
    height: int


def requires_output_copy() -> bool:
    """Probe whether the embedding host wants returned buffers isolated.

    Reads the PIXMILL_COPY_OUTPUT environment variable.
    """
    return os.environ.get(COPY_OUTPUT_ENV, "").strip().lower() in _TRUTHY


# Hosts may swap the probe (e.g. an embedding layer that knows its runtime)
output_copy_probe: Callable[[], bool] = requires_output_copy


def run_transform(
    spec: TransformSpec,
    target: OutputTarget,
    options: EncodingOptions | None = None,
) -> ComputedImage:
    """
    Render a spec and encode the result.

    This is the single blocking implementation behind every entry point.

    Args:
        spec: Spec to render (treated as frozen)
        target: Raw pixel layout or container format
        options: Encoding options for container targets

    Returns:
        ComputedImage with the encoded bytes and final size
    """
    with log_duration(logger, f"render {len(spec)} op(s) -> {target.value}"):
        image = render_image(spec)
        data = encode(image, target, options)
    return ComputedImage(buffer=data, width=image.width, height=image.height)


def _isolate(result: ComputedImage) -> ComputedImage:
    # memoryview.tobytes() always allocates, unlike bytes(b) or b[:]
    return ComputedImage(
        buffer=memoryview(result.buffer).tobytes(),
        width=result.width,
        height=result.height,
    )


def apply_copy_policy(result: ComputedImage, copy_output: bool | None = None) -> ComputedImage:
    """Copy `result` when forced, or when `output_copy_probe` asks for it."""
    if copy_output is None:
        copy_output = output_copy_probe()
    if copy_output:
        logger.debug("Copying output buffer for host isolation")
        return _isolate(result)
    return result


def render(
    spec: TransformSpec,
    target: OutputTarget | str = PixelFormat.RGBA,
    options: EncodingOptions | None = None,
    copy_output: bool | None = None,
) -> ComputedImage:
    """
    Render and encode a spec on the calling thread.

    Args:
        spec: Spec to render
        target: Raw pixel layout or container format (enum or string)
        options: Encoding options for container targets
        copy_output: Force (True) or skip (False) a defensive copy of the
            returned buffer; None asks `output_copy_probe`

    Returns:
        ComputedImage
    """
    target = parse_target(target)
    return apply_copy_policy(run_transform(spec.clone(), target, options), copy_output)


def get_executor(max_workers: int | None = None) -> ThreadPoolExecutor:
    """Return the shared worker pool, creating it on first use."""
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="pixmill")
            logger.debug("Started worker pool (max_workers=%s)", max_workers)
        return _executor


def shutdown_executor(wait: bool = True) -> None:
    """Shut down the shared worker pool; a new one is created on next use."""
    global _executor
    with _executor_lock:
        if _executor is not None:
            _executor.shutdown(wait=wait)
            _executor = None


def render_async(
    spec: TransformSpec,
    target: OutputTarget | str = PixelFormat.RGBA,
    options: EncodingOptions | None = None,
    executor: Executor | None = None,
) -> Future[ComputedImage]:
    """
    Schedule a render on a worker thread.

    A scheduled render cannot be interrupted once it starts; `cancel()` on
    the returned future only succeeds while the task is still queued.
    Failures are delivered through the future.

    Args:
        spec: Spec to render
        target: Raw pixel layout or container format (enum or string)
        options: Encoding options for container targets
        executor: Pool to submit to (defaults to the shared pool)

    Returns:
        Future resolving to a ComputedImage
    """
    target = parse_target(target)
    pool = executor if executor is not None else get_executor()
    return pool.submit(run_transform, spec.clone(), target, options)
