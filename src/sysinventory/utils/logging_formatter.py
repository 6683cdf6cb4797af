"""
UTC timestamp logging formatter for sysinventory.

Every record is prefixed with the moment it was created, rendered in UTC
inside square brackets, so logs from hosts in different zones line up.
"""

import datetime
import logging

DEFAULT_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


class UTCTimestampFormatter(logging.Formatter):
    """
    Formatter producing ``[YYYY-MM-DD HH:MM:SS.mmm UTC] <format>``.
    """

    def __init__(self, fmt: str = DEFAULT_LOG_FORMAT):
        super().__init__(fmt)

    def format(self, record):
        created = datetime.datetime.fromtimestamp(
            record.created, tz=datetime.timezone.utc
        )
        stamp = created.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        return f"[{stamp} UTC] {super().format(record)}"
