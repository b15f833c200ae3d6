import logging
import re

import pytest

from mercari_e2e.log import GREEN, LineFormatter, RESET, StrictFileHandler, get_logger


LINE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z \[(\w+)\]: (.*)$")


def _record(level=logging.INFO, msg="Starting Test Case: search"):
    return logging.LogRecord("mercari_e2e.test", level, __file__, 1, msg, None, None)


def test_line_format():
    line = LineFormatter().format(_record())
    match = LINE.match(line)
    assert match, line
    assert match.group(1) == "info"
    assert match.group(2) == "Starting Test Case: search"


def test_level_names_are_lowercase():
    line = LineFormatter().format(_record(logging.WARNING, "soft failure"))
    assert "[warning]: soft failure" in line


def test_colorized_lines_are_wrapped_in_escape_codes():
    line = LineFormatter(colorize=True).format(_record(logging.ERROR, "boom"))
    assert line.startswith("\x1b[31m")
    assert line.endswith(RESET)


def test_message_colors_survive_plain_formatting():
    line = LineFormatter().format(_record(msg=f"{GREEN}Test Case Passed: x{RESET}"))
    assert line.endswith(f"{GREEN}Test Case Passed: x{RESET}")


def test_child_loggers_share_the_package_namespace():
    assert get_logger("actions").name == "mercari_e2e.actions"
    assert get_logger().name == "mercari_e2e"


class _BrokenStream:
    def write(self, data):
        raise OSError("disk full")

    def flush(self):
        pass

    def close(self):
        pass


def test_file_write_failures_propagate(tmp_path):
    handler = StrictFileHandler(tmp_path / "info.log", encoding="utf-8", delay=True)
    handler.setFormatter(LineFormatter())
    handler.stream = _BrokenStream()
    logger = logging.getLogger("tests.strict_handler")
    logger.propagate = False
    logger.addHandler(handler)
    try:
        with pytest.raises(OSError, match="disk full"):
            logger.error("cannot be written")
    finally:
        logger.removeHandler(handler)
        handler.stream = None


def test_file_handler_writes_lines(tmp_path):
    path = tmp_path / "info.log"
    handler = StrictFileHandler(path, encoding="utf-8")
    handler.setFormatter(LineFormatter())
    handler.emit(_record(msg="written"))
    handler.close()
    assert LINE.match(path.read_text(encoding="utf-8").strip())
