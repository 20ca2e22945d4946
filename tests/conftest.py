"""Pytest fixtures."""

from __future__ import annotations

import pathlib

import geom2d
import pytest

_TEST_DIR = pathlib.Path(__file__).parent


@pytest.fixture(scope='session', autouse=True)
def _initialize() -> None:
    geom2d.set_epsilon(1e-8)


@pytest.fixture
def files_dir() -> pathlib.Path:
    """Directory containing the SVG test documents."""
    return _TEST_DIR / 'files'
