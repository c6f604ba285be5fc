"""Tests for batch manifest loading."""

from pathlib import Path

import pytest

from ito.engine.duotone import DuotoneSpec
from ito.exceptions import ManifestError
from ito.manifest import build_requests, load_manifest, load_manifest_from_dict
from ito.transform.digest import create_args_digest


def _write(path: Path, content: str) -> Path:
    path.write_text(content)
    return path


class TestLoadManifest:
    """Tests for load_manifest()."""

    def test_valid_manifest(self, temp_dir):
        path = _write(
            temp_dir / "m.yaml",
            """\
output_dir: out/
use_mozjpeg: true
transforms:
  - to_format: png
    width: 500
    quality: 80
  - output: thumb.jpg
    toFormat: jpg
    width: 100
    grayscale: true
    duotone:
      highlight: "#f00e2e"
      shadow: "#192550"
      opacity: 40
""",
        )
        manifest = load_manifest(path)

        assert manifest.output_dir == Path("out/")
        assert manifest.use_mozjpeg is True
        assert manifest.strip_metadata is None
        first, second = manifest.transforms
        assert first.to_args().quality == 80
        args = second.to_args()
        assert args.to_format == "jpg"
        assert args.grayscale is True
        assert args.duotone == DuotoneSpec("#f00e2e", "#192550", 40)

    def test_camel_case_batch_options(self, temp_dir):
        path = _write(
            temp_dir / "m.yaml",
            """\
outputDir: public/static
stripMetadata: true
useMozjpeg: false
transforms:
  - toFormat: webp
""",
        )
        manifest = load_manifest(path)

        assert manifest.output_dir == Path("public/static")
        assert manifest.strip_metadata is True
        assert manifest.use_mozjpeg is False

    def test_missing_file(self, temp_dir):
        with pytest.raises(ManifestError, match="not found"):
            load_manifest(temp_dir / "absent.yaml")

    def test_invalid_yaml(self, temp_dir):
        path = _write(temp_dir / "m.yaml", "transforms: [\n")
        with pytest.raises(ManifestError, match="Invalid YAML"):
            load_manifest(path)

    def test_empty_file(self, temp_dir):
        with pytest.raises(ManifestError, match="empty"):
            load_manifest(_write(temp_dir / "m.yaml", ""))

    def test_not_a_mapping(self, temp_dir):
        with pytest.raises(ManifestError, match="mapping"):
            load_manifest(_write(temp_dir / "m.yaml", "- a\n- b\n"))


class TestManifestValidation:
    """Tests for manifest model validation."""

    def test_unknown_key_rejected(self):
        with pytest.raises(ManifestError) as exc_info:
            load_manifest_from_dict(
                {"transforms": [{"to_format": "png", "blur": 2}]}
            )
        assert exc_info.value.field == "transforms.0.blur"

    def test_format_required(self):
        with pytest.raises(ManifestError, match="transforms.0"):
            load_manifest_from_dict({"transforms": [{"width": 10}]})

    def test_unsupported_format(self):
        with pytest.raises(ManifestError, match="Unsupported output format"):
            load_manifest_from_dict({"transforms": [{"to_format": "bmp"}]})

    def test_invalid_fit(self):
        with pytest.raises(ManifestError, match="Invalid fit"):
            load_manifest_from_dict(
                {"transforms": [{"to_format": "png", "fit": "squash"}]}
            )

    @pytest.mark.parametrize("quality", [-1, 101])
    def test_quality_range(self, quality):
        with pytest.raises(ManifestError, match="quality"):
            load_manifest_from_dict(
                {"transforms": [{"to_format": "png", "quality": quality}]}
            )

    def test_invalid_duotone_colour(self):
        with pytest.raises(ManifestError, match="Invalid colour"):
            load_manifest_from_dict(
                {
                    "transforms": [
                        {
                            "to_format": "png",
                            "duotone": {"highlight": "red", "shadow": "#000"},
                        }
                    ]
                }
            )

    def test_transforms_required(self):
        with pytest.raises(ManifestError):
            load_manifest_from_dict({"transforms": []})


class TestBuildRequests:
    """Tests for build_requests()."""

    def test_names_outputs(self, temp_dir):
        manifest = load_manifest_from_dict(
            {
                "output_dir": str(temp_dir / "out"),
                "transforms": [
                    {"to_format": "png", "width": 500},
                    {"output": "thumb.jpg", "to_format": "jpg", "width": 100},
                ],
            }
        )
        first, second = build_requests(manifest, Path("photos/cat.jpg"))

        digest = create_args_digest(first.args)
        assert first.output_path == temp_dir / "out" / f"cat-{digest}.png"
        assert second.output_path == temp_dir / "out" / "thumb.jpg"

    def test_output_dir_override(self, temp_dir):
        manifest = load_manifest_from_dict(
            {
                "output_dir": "ignored",
                "transforms": [{"output": "a.png", "to_format": "png"}],
            }
        )
        (request,) = build_requests(manifest, Path("x.jpg"), temp_dir)
        assert request.output_path == temp_dir / "a.png"

    def test_duplicates_collapsed(self):
        manifest = load_manifest_from_dict(
            {
                "transforms": [
                    {"to_format": "png", "width": 500},
                    {"to_format": "png", "width": 500.0},
                ]
            }
        )
        assert len(build_requests(manifest, Path("x.jpg"))) == 1
