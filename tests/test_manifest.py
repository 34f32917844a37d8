"""Tests for build manifest loading."""

import pytest
from pydantic import ValidationError

from distrender.core.manifest import ManifestError, load_manifest

MANIFEST = """\
name: My-Dist
version: 1.0
authors: Ann
finders:
  JsTemplates:
    dir: public
    file: "*.js.tt"
templates:
  - finder: JsTemplates
    replace: true
    prune: 1
    var:
      - api = https://example.invalid
  - plugin_name: Docs
    var:
      title: Manual
"""


@pytest.fixture
def manifest_path(tmp_path):
    path = tmp_path / "distrender.yaml"
    path.write_text(MANIFEST)
    return path


class TestLoadManifest:
    def test_metadata(self, manifest_path):
        manifest = load_manifest(manifest_path)
        metadata = manifest.metadata()
        assert metadata.name == "My-Dist"
        assert metadata.version == "1.0"
        assert metadata.authors == ["Ann"]

    def test_finders(self, manifest_path):
        finder = load_manifest(manifest_path).finders["JsTemplates"]
        assert finder.dir == ["public"]
        assert finder.file == ["*.js.tt"]

    def test_templates(self, manifest_path):
        first, second = load_manifest(manifest_path).templates
        assert first.finder == "JsTemplates"
        assert first.replace is True
        assert first.prune is True
        assert first.var == ["api = https://example.invalid"]
        assert first.output_regex == r"/\.tt$//"
        assert second.plugin_name == "Docs"
        assert second.var == ["title = Manual"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ManifestError):
            load_manifest(tmp_path / "missing.yaml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ManifestError):
            load_manifest(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("name: [unclosed\n")
        with pytest.raises(ManifestError):
            load_manifest(path)

    def test_invalid_output_regex(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("name: X\ntemplates:\n  - output_regex: nope\n")
        with pytest.raises(ValidationError):
            load_manifest(path)
