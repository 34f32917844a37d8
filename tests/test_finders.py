"""Tests for file finders."""

import pytest
from pydantic import ValidationError

from distrender.core.models import DistFile, FinderConfig
from distrender.dist.finders import BUILTIN_FINDERS, select_by_name

NAMES = [
    "README.md.tt",
    "lib/Foo.pm.tt",
    "public/js/version.js.tt",
    "public/js/version.js",
    "public/css/site.css.tt",
    "t/basic.t",
]


@pytest.fixture
def files():
    return [DistFile(name=name) for name in NAMES]


def _names(files):
    return [f.name for f in files]


class TestSelectByName:
    """Tests for directory, glob and regex selection."""

    def test_empty_config_selects_everything(self, files):
        assert _names(select_by_name(FinderConfig(), files)) == NAMES

    def test_basename_glob(self, files):
        config = FinderConfig(file="*.js.tt")
        assert _names(select_by_name(config, files)) == ["public/js/version.js.tt"]

    def test_glob_with_slash_matches_full_name(self, files):
        config = FinderConfig(file=["lib/*.tt"])
        assert _names(select_by_name(config, files)) == ["lib/Foo.pm.tt"]

    def test_dir_restricts(self, files):
        config = FinderConfig(dir=["public"], file=["*.tt"])
        assert _names(select_by_name(config, files)) == [
            "public/js/version.js.tt",
            "public/css/site.css.tt",
        ]

    def test_dir_alone(self, files):
        assert _names(select_by_name(FinderConfig(dir="t"), files)) == ["t/basic.t"]

    def test_match_regex(self, files):
        config = FinderConfig(match=[r"\.pm\.tt$"])
        assert _names(select_by_name(config, files)) == ["lib/Foo.pm.tt"]

    def test_file_or_match(self, files):
        config = FinderConfig(file=["README*"], match=[r"^t/"])
        assert _names(select_by_name(config, files)) == ["README.md.tt", "t/basic.t"]

    def test_skip(self, files):
        config = FinderConfig(file=["*.tt"], skip=["css"])
        assert "public/css/site.css.tt" not in _names(select_by_name(config, files))

    def test_invalid_regex_rejected(self):
        with pytest.raises(ValidationError):
            FinderConfig(match=["("])


class TestBuiltinFinders:
    def test_all_files(self, files):
        assert BUILTIN_FINDERS[":AllFiles"](files) == files

    def test_no_files(self, files):
        assert BUILTIN_FINDERS[":NoFiles"](files) == []
