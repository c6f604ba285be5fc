"""Transform arguments, fingerprints and step composition.

Module organization:
- types.py: TransformArgs, TransformRequest, TransformOutcome
- digest.py: Argument fingerprints and fingerprint-based output naming
- steps.py: Ordered composition of conditional pipeline steps
"""

from ito.engine.duotone import DuotoneSpec
from ito.transform.digest import (
    ARGS_WHITELIST,
    create_args_digest,
    dedupe_transforms,
    filter_args,
    output_path_for,
)
from ito.transform.steps import compose_pipeline, round_dimension, stage_format
from ito.transform.types import (
    TransformArgs,
    TransformOutcome,
    TransformRequest,
)

__all__ = [
    "ARGS_WHITELIST",
    "DuotoneSpec",
    "TransformArgs",
    "TransformOutcome",
    "TransformRequest",
    "compose_pipeline",
    "create_args_digest",
    "dedupe_transforms",
    "filter_args",
    "output_path_for",
    "round_dimension",
    "stage_format",
]
