"""icsorg command line: ICS source in, Org file out."""
from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from . import __version__
from .errors import ExitCode, handle_error
from .pipeline import ConvertRequest, run_convert
from .settings import load_settings

RC_HELP = """\
By default the rc file ``~/.icsorgrc`` is read. It is a YAML mapping of
NAME: value pairs; environment variables of the same names override it and
command-line switches override both:

  AUTHOR    Your name. Used to identify you in meeting attendee lists
  EMAIL     Your email address. Also used to identify you in attendee lists
  ICS_FILE  Path or http(s) URL of the ICS input
  ORG_FILE  Org file to write (overwritten). Use - for stdout
  TITLE     #+TITLE: header. Defaults to 'Calendar'
  CATEGORY  #+CATEGORY: header
  STARTUP   #+STARTUP: header
  FILETAGS  #+FILETAGS: header
  PAST      Days in the past to include events from. Default 7
  FUTURE    Days into the future to include events from. Default 365
  TIMEZONE  IANA zone timestamps are shown in. Default: local zone
  SORT      true to order entries by start time
"""

HELP_PAST = "Number of days in the past to include events from (default 7)"
HELP_FUTURE = "Number of days into the future to include events from (default 365)"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="icsorg",
        description="Convert an ICS calendar into an Org file of events",
        epilog=RC_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", "-V", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-a", dest="author", help="Author. Used for attendee matching")
    parser.add_argument("-e", dest="email", help="Email. Used for attendee matching")
    parser.add_argument("-c", dest="rc_file", metavar="config_file", help="Path to configuration file")
    parser.add_argument("-i", dest="ics_file", metavar="input_file", help="Path or URL of the ICS input")
    parser.add_argument("-o", dest="org_file", metavar="output_file", help="Path of the org file to create")
    parser.add_argument("-p", dest="past", type=int, metavar="days", help=HELP_PAST)
    parser.add_argument("-f", dest="future", type=int, metavar="days", help=HELP_FUTURE)
    parser.add_argument("--tz", dest="timezone", help="IANA time zone for timestamps (default local)")
    parser.add_argument("--sort", action="store_true", default=None, help="Order entries by start time")
    parser.add_argument("--dump", action="store_true", help="Dump the current configuration and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def dump_settings(settings) -> int:
    for key, value in settings.as_dict().items():
        print(f"{key} = {value}")
    return int(ExitCode.SUCCESS)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)
    overrides = {
        name: getattr(args, name)
        for name in ("author", "email", "ics_file", "org_file", "past", "future", "timezone", "sort")
    }
    try:
        settings = load_settings(args.rc_file, overrides=overrides).with_window()
        if args.dump:
            return dump_settings(settings)
        return run_convert(ConvertRequest(settings=settings))
    except (Exception, KeyboardInterrupt) as e:
        return handle_error(e, verbose=args.verbose)


if __name__ == "__main__":
    raise SystemExit(main())
