"""
Tests for the UTC timestamp logging formatter.
"""

import logging
import re

from src.sysinventory.utils.logging_formatter import UTCTimestampFormatter


def _record(message="collected 3 disks"):
    return logging.LogRecord(
        name="sysinventory.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )


class TestUTCTimestampFormatter:
    """Tests for UTCTimestampFormatter."""

    def test_prefix_format(self):
        """Test the bracketed UTC prefix."""
        output = UTCTimestampFormatter("%(levelname)s: %(message)s").format(_record())

        assert re.match(
            r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{3} UTC\] INFO: collected 3 disks$",
            output,
        )

    def test_uses_record_time(self):
        """Test that the stamp comes from the record, not the clock."""
        record = _record()
        record.created = 0.25

        output = UTCTimestampFormatter("%(message)s").format(record)

        assert output.startswith("[1970-01-01 00:00:00.250 UTC] ")

    def test_default_format_includes_logger_name(self):
        """Test the default format."""
        output = UTCTimestampFormatter().format(_record())

        assert output.endswith("INFO sysinventory.test: collected 3 disks")
