import io
import logging
from collections.abc import Generator
from unittest.mock import patch

import pytest

from avatar_pipeline.logging.logger import LOG_FORMAT, Log, StructuredFormatter


@pytest.fixture
def captured() -> Generator[io.StringIO, None, None]:
    logger = logging.getLogger("avatar_pipeline")
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter("[%(levelname)s] %(message)s"))
    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        yield stream
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)


class TestStructuredOutput:
    def test_renders_extra_fields(self, captured: io.StringIO) -> None:
        Log.error(
            "Avatar uploaded but profile update failed",
            user_id="u1",
            avatar_url="https://cdn/u1/avatar.jpg",
            reconcile=True,
        )

        line = captured.getvalue().strip()
        assert line.startswith("[ERROR] Avatar uploaded but profile update failed ")
        assert "reconcile=True" in line
        assert "user_id=u1" in line
        assert "avatar_url=https://cdn/u1/avatar.jpg" in line

    def test_fields_are_sorted_by_name(self, captured: io.StringIO) -> None:
        Log.info("Upload started", user_id="u1", compress=False)

        assert captured.getvalue().strip() == "[INFO] Upload started compress=False user_id=u1"

    def test_plain_message_without_fields(self, captured: io.StringIO) -> None:
        Log.warning("Thumbnail skipped")

        assert captured.getvalue().strip() == "[WARNING] Thumbnail skipped"

    def test_standard_record_attributes_are_not_repeated(self) -> None:
        record = logging.LogRecord("avatar_pipeline", logging.INFO, __file__, 1, "hello", None, None)

        assert StructuredFormatter("%(message)s").format(record) == "hello"


class TestConfigure:
    def test_attaches_structured_stdout_handler(self) -> None:
        logger = logging.getLogger("avatar_pipeline.configure_check")
        with patch.object(Log, "_logger", logger):
            Log.configure("debug")
            Log.configure("debug")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)
        assert logger.handlers[0].formatter._fmt == LOG_FORMAT
        logger.removeHandler(logger.handlers[0])
