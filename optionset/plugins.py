"""Base classes for ``optionset`` command line commands.

Examples:

    Say you want a new command ``foo`` that is executed by running

    .. code-block:: console

        $ optionset foo

    All you have to do is extend :class:`Command`::

        class Foo(Command):
            name = "foo"
            help = "This is the foo command!"

            def __init_arguments__(self, parser: ArgumentParser):
                parser.add_argument("--bar", type=str, help="baz")

            def run(self, args: Namespace):
                print(f"Inside foo: {args.bar!r}")
                return 0

    Simply extending :class:`Command` registers the command, as long as the module defining it has been imported
    before :func:`add_command_subparsers` is called.

"""

from abc import ABC, ABCMeta, abstractmethod
from argparse import ArgumentParser, Namespace
from inspect import isabstract
from typing import Dict, Tuple, Type


PLUGINS: Dict[str, Type["Plugin"]] = {}
"""A global dictionary mapping plugin names to their types."""
COMMANDS: Dict[str, Type["Command"]] = {}
"""A global dictionary mapping commands to their types."""


class PluginMeta(ABCMeta):
    """Metaclass for optionset plugins."""

    def __init__(cls, name, bases, clsdict):
        super().__init__(name, bases, clsdict)
        if not isabstract(cls) and name not in ("Plugin", "Command"):
            if "plugin_name" in clsdict:
                plugin_name = clsdict["plugin_name"]
            elif "name" in clsdict:
                plugin_name = clsdict["name"]
            else:
                raise TypeError(f"optionset plugin {name} does not define a name")
            if plugin_name in PLUGINS:
                raise TypeError(
                    f"Cannot instantiate class {cls.__name__} because a plugin named {plugin_name} already exists,"
                    f" implemented by class {PLUGINS[plugin_name]}"
                )
            PLUGINS[plugin_name] = cls
            if issubclass(cls, Command):
                if "help" not in clsdict:
                    raise TypeError(f"optionset command {name} does not define a help string")
                COMMANDS[clsdict["name"]] = cls


class Plugin(ABC, metaclass=PluginMeta):
    """Abstract base class for all optionset plugins.

    At a minimum, a plugin must define a unique :attr:`name` class member.

    """

    name: str
    """The name of this plugin."""


class Command(Plugin):
    """Abstract base class for commands exposed on the ``optionset`` command line."""

    help: str
    """Help string for this command."""
    parent_parsers: Tuple[ArgumentParser, ...] = ()
    """An optional sequence of parent argument parsers from which to parse options."""

    def __init__(self, argument_parser: ArgumentParser):
        self.__init_arguments__(argument_parser)

    def __init_arguments__(self, parser: ArgumentParser):
        """Initializes this command's argument parser.

        Subclasses should extend this function and add any necessary options to ``parser``.

        """
        pass

    @abstractmethod
    def run(self, args: Namespace):
        """Callback for when the command is run.

        Args:
            args: The result of parsing the commandline arguments set up by :meth:`Command.__init_arguments__`.

        Returns:
            The process exit code; ``None`` is treated as success.

        """
        raise NotImplementedError()


def add_command_subparsers(parser: ArgumentParser):
    """Adds subparsers for all registered commands"""
    subparsers = parser.add_subparsers(
        title="command",
        description="valid optionset commands",
        help="run `optionset command --help` for help on a specific command",
    )
    for name, command_type in COMMANDS.items():
        p = subparsers.add_parser(name, parents=command_type.parent_parsers, help=command_type.help)
        p.set_defaults(func=command_type(p).run)
    return subparsers
