"""Unit tests for logging context module."""

import logging
import threading
from pathlib import Path

from av1shrink.logging.context import (
    ConversionContextFilter,
    conversion_context,
    get_input_file,
)


def _record() -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, __file__, 1, "msg", (), None)


class TestConversionContext:
    """Tests for conversion_context context manager."""

    def test_default_is_none(self) -> None:
        """No input file is set outside a conversion."""
        assert get_input_file() is None

    def test_sets_and_resets(self) -> None:
        """Test that the input file is set inside the block only."""
        with conversion_context(Path("/videos/movie.mkv")):
            assert get_input_file() == "/videos/movie.mkv"
        assert get_input_file() is None

    def test_resets_on_exception(self) -> None:
        """Test that the context is restored when the block raises."""
        try:
            with conversion_context("/videos/movie.mkv"):
                raise ValueError("boom")
        except ValueError:
            pass
        assert get_input_file() is None

    def test_nested(self) -> None:
        """Test that nested contexts restore the outer value."""
        with conversion_context("/a.mkv"):
            with conversion_context("/b.mkv"):
                assert get_input_file() == "/b.mkv"
            assert get_input_file() == "/a.mkv"

    def test_thread_isolation(self) -> None:
        """Test that a context set in one thread is invisible in another."""
        seen: list[str | None] = []

        with conversion_context("/videos/movie.mkv"):
            thread = threading.Thread(target=lambda: seen.append(get_input_file()))
            thread.start()
            thread.join()

        assert seen == [None]


class TestConversionContextFilter:
    """Tests for ConversionContextFilter."""

    def test_adds_fields_inside_context(self) -> None:
        record = _record()
        with conversion_context("/videos/movie.mkv"):
            assert ConversionContextFilter().filter(record) is True

        assert record.input_file == "/videos/movie.mkv"
        assert record.input_tag == "[movie.mkv] "

    def test_empty_tag_outside_context(self) -> None:
        record = _record()
        assert ConversionContextFilter().filter(record) is True

        assert record.input_file is None
        assert record.input_tag == ""
