"""Shared fixtures."""

import pytest

from support import RecordingTransport


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()
