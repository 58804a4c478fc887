"""Tests for console log rendering."""

import io

from jwtctl.core.logging import configure_logging, get_logger


class TestConfigureLogging:
    """Tests for level filtering and line format."""

    def test_renders_level_and_message(self) -> None:
        stream = io.StringIO()
        configure_logging("info", stream=stream)
        get_logger("test").info("Header  : {}")
        assert stream.getvalue() == "INFO  | Header  : {}\n"

    def test_filters_below_level(self) -> None:
        stream = io.StringIO()
        configure_logging("warning", stream=stream)
        log = get_logger("test")
        log.info("hidden")
        log.warning("shown")
        assert stream.getvalue() == "WARNING | shown\n"

    def test_extra_fields(self) -> None:
        stream = io.StringIO()
        configure_logging("debug", stream=stream)
        get_logger("test").debug("loaded", path="key.pem")
        assert stream.getvalue() == "DEBUG | loaded path=key.pem\n"
