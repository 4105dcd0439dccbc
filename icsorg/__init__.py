"""icsorg package.

Converts an iCalendar source into an Org-mode file of events covering a
date window around today.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
