"""Shared pytest fixtures."""

import io

import pytest
from PIL import Image
from test_helpers import reset_all_globals


@pytest.fixture(autouse=True)
def reset_global_state():
    """Drop shared controller, service and repository singletons after each test."""
    yield
    reset_all_globals()


@pytest.fixture
def png_bytes() -> bytes:
    """A small card-shaped PNG image."""
    buffer = io.BytesIO()
    Image.new("RGB", (246, 343), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()
