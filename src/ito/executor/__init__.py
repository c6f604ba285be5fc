"""Batch execution: format dispatch and pipeline orchestration.

Module organization:
- dispatch.py: Terminal encode strategy per format (FormatDispatcher)
- orchestrator.py: Decode once, fan out transforms (process_file, process_batch)
"""

from ito.executor.dispatch import (
    BASELINE_JPEG_QUALITY,
    EncodeStrategy,
    FormatDispatcher,
    ProcessOptions,
    dispatch_transform,
    select_strategy,
)
from ito.executor.orchestrator import (
    open_source,
    process_batch,
    process_file,
    run_transform,
)

__all__ = [
    "BASELINE_JPEG_QUALITY",
    "EncodeStrategy",
    "FormatDispatcher",
    "ProcessOptions",
    "dispatch_transform",
    "open_source",
    "process_batch",
    "process_file",
    "run_transform",
    "select_strategy",
]
