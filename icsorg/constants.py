"""Constants shared across icsorg modules."""

from __future__ import annotations

# Weekday abbreviations for Org timestamps, Monday first like date.weekday().
# Kept fixed so output does not depend on the process locale.
WEEKDAY_ABBREV = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

FMT_ORG_DATE = "%Y-%m-%d"
FMT_ORG_TIME = "%H:%M"

# Org drawer/header labels are padded so values line up in one column
PROPERTY_WIDTH = 16
HEADER_WIDTH = 15

DEFAULT_TITLE = "Calendar"
DEFAULT_DESCRIPTION = "converted using icsorg"
DEFAULT_RC_FILE = "~/.icsorgrc"
DEFAULT_PAST_DAYS = 7
DEFAULT_FUTURE_DAYS = 365
DEFAULT_MAX_ITERATIONS = 1000
DEFAULT_FETCH_TIMEOUT = 30
