"""YAML batch manifests: validation and conversion to transform requests."""

from ito.manifest.loader import (
    build_requests,
    load_manifest,
    load_manifest_from_dict,
)
from ito.manifest.models import DuotoneModel, ManifestModel, TransformModel

__all__ = [
    "DuotoneModel",
    "ManifestModel",
    "TransformModel",
    "build_requests",
    "load_manifest",
    "load_manifest_from_dict",
]
