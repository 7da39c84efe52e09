# tests/unit/logging/test_unit_handlers.py — v1
"""Tests for logging/handlers.py — size parsing and rotating handler."""

from __future__ import annotations

from logging.handlers import RotatingFileHandler

import pytest

from peernet.logging.handlers import create_rotating_handler, parse_size


class TestParseSize:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [("10MB", 10 * 1024**2), ("512kb", 512 * 1024), ("1 GB", 1024**3), ("2048", 2048), ("7B", 7)],
    )
    def test_valid(self, text, expected):
        assert parse_size(text) == expected

    @pytest.mark.parametrize("text", ["", "MB", "10TB", "-1MB"])
    def test_invalid(self, text):
        with pytest.raises(ValueError, match="Invalid size"):
            parse_size(text)


class TestCreateRotatingHandler:
    def test_creates_parent(self, tmp_path):
        target = tmp_path / "nested" / "out.log"
        handler = create_rotating_handler(target, rotation="1KB", retention=3)
        try:
            assert isinstance(handler, RotatingFileHandler)
            assert handler.maxBytes == 1024
            assert handler.backupCount == 3
            assert target.parent.is_dir()
        finally:
            handler.close()
