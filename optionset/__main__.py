import argparse
import logging
import sys

from . import __version__, commands  # noqa: F401
from .generator import OptionSetSpecError
from .plugins import add_command_subparsers

log = logging.getLogger("optionset")


def main():
    parser = argparse.ArgumentParser(
        description=(
            "optionset generates typed bitmask (option set) classes from declarative specifications"
            " and describes raw masks."
        )
    )

    parser.add_argument(
        "--version",
        "-v",
        action="store_true",
        help="print optionset's version and exit",
    )
    parser.add_argument("--debug", "-d", action="store_true", help="enables debug logging")

    add_command_subparsers(parser)

    args = parser.parse_args()

    if args.debug:
        logging.basicConfig()
        log.setLevel(logging.DEBUG)

    if not hasattr(args, "func"):
        if args.version:
            print(__version__)
            return 0

        parser.print_help()
        return 1

    try:
        retval = args.func(args)
    except OptionSetSpecError as e:
        sys.stderr.write(f"error: {e!s}\n")
        return 1
    if retval is None:
        retval = 0
    elif not isinstance(retval, int):
        if retval:
            retval = 0
        else:
            retval = 1

    return retval


if __name__ == "__main__":
    sys.exit(main())
