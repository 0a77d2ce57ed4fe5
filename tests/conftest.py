"""Shared pytest fixtures."""

from __future__ import annotations

import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from domain.models import ImageBlob, RetryPolicy  # noqa: E402


@pytest.fixture
def image() -> ImageBlob:
    return ImageBlob(data=b"\xff\xd8\xff\xe0fake-jpeg", mime_type="image/jpeg", filename="fridge.jpg")


@pytest.fixture
def no_wait() -> RetryPolicy:
    """Three attempts, no backoff delay."""
    return RetryPolicy(max_attempts=3, base_delay_ms=0)
