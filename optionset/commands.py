import logging
import sys
from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import List, TextIO

from .generator import build_option_set, load_specs, OptionSetSpec, OptionSetSpecError, render_module
from .plugins import Command

log = logging.getLogger("optionset")


def raw_value(text: str) -> int:
    """Parses a raw mask given on the command line, e.g. ``5``, ``0b101``, ``0x1f`` or ``-1``."""
    return int(text, 0)


def write_source(source: str, stream: TextIO):
    if stream.isatty():
        from pygments import highlight
        from pygments.formatters import TerminalFormatter
        from pygments.lexers.python import PythonLexer

        source = highlight(source, PythonLexer(), TerminalFormatter())
    stream.write(source)


def select_spec(specs: List[OptionSetSpec], class_name: str = "") -> OptionSetSpec:
    if class_name:
        for spec in specs:
            if spec.class_name == class_name:
                return spec
        raise OptionSetSpecError(
            f"No option set named {class_name}; expected one of {', '.join(spec.class_name for spec in specs)}"
        )
    elif len(specs) != 1:
        raise OptionSetSpecError(
            f"Found {len(specs)} option set specifications; select one with --type "
            f"({', '.join(spec.class_name for spec in specs)})"
        )
    return specs[0]


class GenerateCommand(Command):
    name = "generate"
    help = "generate OptionSet subclasses from a JSON specification file"

    def __init_arguments__(self, parser: ArgumentParser):
        parser.add_argument("SPEC_JSON", type=str, help="path to a JSON option set specification (or a list of them)")
        parser.add_argument(
            "--output", "-o", type=str, default=None, help="path to which to save the generated module (default: stdout)"
        )
        parser.add_argument(
            "--no-format", action="store_true", help="do not normalize the generated source with black"
        )

    def run(self, args: Namespace):
        specs = load_specs(args.SPEC_JSON)
        source = render_module(specs, format_code=not args.no_format)
        if args.output is None:
            write_source(source, sys.stdout)
        else:
            Path(args.output).write_text(source)
            log.info(f"Saved {len(specs)} option set(s) to {args.output}")
        return 0


class DescribeCommand(Command):
    name = "describe"
    help = "print the options that are on in one or more raw masks"

    def __init_arguments__(self, parser: ArgumentParser):
        parser.add_argument("SPEC_JSON", type=str, help="path to a JSON option set specification (or a list of them)")
        parser.add_argument("RAW_VALUE", type=raw_value, nargs="+", help="masks to describe, e.g. 5, 0b101, or 0x5")
        parser.add_argument(
            "--type", "-t", type=str, default="", help="the option set to use if the file declares more than one"
        )

    def run(self, args: Namespace):
        option_set_type = build_option_set(select_spec(load_specs(args.SPEC_JSON), args.type))
        for value in args.RAW_VALUE:
            print(option_set_type.from_raw_value(value).describe())
        return 0
