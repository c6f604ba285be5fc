"""Pillow-backed decode/encode engine.

Provides deferred image pipelines (decode handles), process-wide engine
configuration, and the duotone colour transform.
"""

from ito.engine.duotone import DuotoneSpec, apply_duotone
from ito.engine.formats import OutputFormat
from ito.engine.geometry import Fit
from ito.engine.pipeline import (
    ImagePipeline,
    OutputDirective,
    SourceImage,
    decode_image,
    describe_source,
    write_output,
)
from ito.engine.runtime import (
    EngineSettings,
    configure_engine,
    get_engine_settings,
    run_in_engine,
    shutdown_engine,
)

__all__ = [
    "DuotoneSpec",
    "EngineSettings",
    "Fit",
    "ImagePipeline",
    "OutputDirective",
    "OutputFormat",
    "SourceImage",
    "apply_duotone",
    "configure_engine",
    "decode_image",
    "describe_source",
    "get_engine_settings",
    "run_in_engine",
    "shutdown_engine",
    "write_output",
]
