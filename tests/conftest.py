"""Pytest configuration and fixtures."""
from pathlib import Path

import pytest

from remover_core.config import ProcessingOptions

TARGET = "NET8_0_OR_GREATER"


@pytest.fixture
def options():
    """Default options: target NET8_0_OR_GREATER, files written in place."""
    return ProcessingOptions()


@pytest.fixture
def write_cs(tmp_path):
    """Write a C# file under tmp_path and return its path as a string."""

    def _write(name: str, content: str, bom: bool = False) -> str:
        path = Path(tmp_path) / name
        path.parent.mkdir(parents=True, exist_ok=True)
        data = content.encode("utf-8")
        if bom:
            data = b"\xef\xbb\xbf" + data
        path.write_bytes(data)
        return str(path)

    return _write
