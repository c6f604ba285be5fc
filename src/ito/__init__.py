"""Image Transform Orchestrator.

Fans one decoded source image out into independently configured encode
pipelines, one output file per requested variant.
"""

from ito.exceptions import (
    CompressError,
    DecodeError,
    EncodeError,
    ItoError,
    OutputWriteError,
)
from ito.executor import ProcessOptions, process_batch, process_file
from ito.transform import (
    DuotoneSpec,
    TransformArgs,
    TransformOutcome,
    TransformRequest,
    create_args_digest,
)

__version__ = "0.1.0"

__all__ = [
    "CompressError",
    "DecodeError",
    "DuotoneSpec",
    "EncodeError",
    "ItoError",
    "OutputWriteError",
    "ProcessOptions",
    "TransformArgs",
    "TransformOutcome",
    "TransformRequest",
    "__version__",
    "create_args_digest",
    "process_batch",
    "process_file",
]
