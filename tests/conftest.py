"""Shared fixtures for distrender tests."""

import pytest

from distrender.core.models import DistFile, DistMetadata
from distrender.dist.distribution import Distribution


@pytest.fixture
def metadata():
    return DistMetadata(name="Foo-Bar", version="1.23", authors=["Ann", "Bob"])


@pytest.fixture
def dist(metadata):
    return Distribution(metadata)


@pytest.fixture
def add_files(dist):
    """Add files given as name -> content pairs and return them in order."""

    def add(files):
        created = [DistFile(name=name, content=content) for name, content in files.items()]
        dist.files.extend(created)
        return created

    return add
