"""
Argvector parser: walk argv, select the active command, expose typed lookups.

What this module provides
- Parser: owns a default (top-level) Command plus a mapping of named Commands and
  drives a single parse over a raw argument vector.

Parsing walk (one token at a time, front to back)
1. "-..."                                   → option of the active command.
2. bare token, a command is active           → positional of that command.
3. bare token, no command active, known name → activate that command.
4. bare token otherwise                      → positional of the default command.

The first fault aborts the walk; values assigned before it are kept. The active
command is remembered by name, never by a handle into the commands mapping.

Presentation policy (the parser flags)
- raise_error=True (default): faults are raised to the caller.
- raise_error=False: usage (when print_usage) and the rendered fault are printed to
  stderr through rich, then the process exits with status 1.

Quick start
    from argvector import Argument, Command, Parser

    parser = Parser()
    parser.add_argument(Argument("bool", "--verbose", "-v"))
    build = parser.command("build", "build a target")
    build.add_argument(Argument("string", "target"))
    build.add_argument(Argument("int", "--jobs", "-j", default=1))

    parser.parse(["tool", "-v", "build", "app", "-j", "4"])
    parser.get("bool", "verbose")         # True
    parser.get("int", "build", "jobs")    # 4
    parser.get_active_command_name()      # "build"
"""
import copy
import os.path
import shlex
import sys
import warnings
from collections import deque
from collections.abc import Iterable

from rich.box import ROUNDED
from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .commands import Command
from .faults import *
from .faults import console
from .utils import *
from .values import Kind


class Parser(metaclass=Introspective):
    """
    Top-level argument parser.

    Properties
    - application_name: argv[0] of the parsed vector ("" before parsing).
    - tokens: tokens not consumed yet (empty after a successful parse).
    - default: the default command holding top-level arguments.
    - commands: read-only mapping of named commands.
    - active: name of the active command ("" for the default command).
    - raise_error, descr, fancy, colorful: presentation settings.
    """

    __introspectable__ = (
        "application_name",
        "tokens",
        "default",
        "commands",
        "active",
        "raise_error",
        "descr",
        "fancy",
        "colorful",
    )

    __displayable__ = (
        "application_name",
        "default",
        "commands",
        "active",
    )

    def __init__(self, raise_error=True, print_usage=True, /, *, descr=Unset, fancy=False, colorful=False):
        if not isinstance(descr, str | Text | Unset):
            raise TypeError(f"{type(self).__typename__} 'descr' must be a string")

        self._raise_error = bool(raise_error)
        self._usage_on_error = bool(print_usage)
        self._descr = coalesce(descr) or None
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._application_name = ""
        self._tokens = deque()
        self._default = Command("default", "this is default command")
        self._commands = {}
        self._active = ""
        self._parsed = False

    def add_argument(self, argument, /, replace=True):
        """
        Register a top-level argument on the default command.
        """
        return self._default.add_argument(argument, replace)

    def add_command(self, command, /):
        """
        Register a named command; a command with the same name is replaced.
        """
        if not isinstance(command, Command):
            raise TypeError(f"{type(self).__typename__} command must be a command")
        self._commands[command.name] = command
        return command

    def command(self, name, /, descr=Unset):
        """
        Build, register and return a named command.
        """
        return self.add_command(Command(name, descr))

    def get_active_command(self):
        if not self._active:
            return None
        return self._commands[self._active]

    def get_active_command_name(self):
        return self._active

    def _command(self):
        return self._commands[self._active] if self._active else self._default

    def _parseargs(self):
        while self._tokens:
            token = self._tokens.popleft()

            if token.startswith("-"):
                self._command().set_optional_argument_value(token, self._tokens)
            elif self._active:
                self._commands[self._active].set_positional_argument_value(token)
            elif token in self._commands:
                self._commands[token].activate()
                self._active = token
            else:
                self._default.set_positional_argument_value(token)

    def parse(self, argv=Unset, /):
        """
        Parse an argument vector.

        Parameters
        - argv:
          • Unset: read sys.argv.
          • str: shell-like string, split with shlex.split.
          • Iterable[str]: the vector itself.
          The first element is the application name and is not parsed.

        Behavior
        - Dispatches every remaining token (see the module docstring).
        - Warnings emitted while dispatching are surfaced through trigger().
        - The first UsageError/ConversionError stops the walk and is handed to
          trigger(): raised when raise_error is set, rendered and exited otherwise.

        Raises
        - RuntimeError: the parser already parsed a vector.
        - TypeError: argv is not a string or an iterable of strings.
        """
        if self._parsed:
            raise RuntimeError(f"{type(self).__typename__} can only parse once")

        if argv is Unset:
            argv = list(sys.argv)
        elif isinstance(argv, str):
            argv = shlex.split(argv)
        elif isinstance(argv, Iterable):
            argv = list(argv)
            if not all(isinstance(token, str) for token in argv):
                raise TypeError("parse() argument must be a string or an iterable of strings")
        else:
            raise TypeError("parse() argument must be a string or an iterable of strings")

        self._parsed = True
        self._application_name = argv[0] if argv else ""
        self._tokens = deque(argv[1:])

        try:
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always")
                self._parseargs()
        except (UsageError, ConversionError) as fault:
            # The parse fault wins over a replayed warning escalated to an error.
            try:
                self._replay(caught)
            finally:
                self.trigger(fault)
            return
        self._replay(caught)

    def _replay(self, caught):
        # Surface warnings recorded during the walk with this parser's presentation.
        for record in caught:
            if isinstance(record.message, ArgumentWarning):
                self.trigger(record.message)
            else:
                warnings.warn_explicit(record.message, record.category, record.filename, record.lineno)

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this parser's presentation settings.

        - Errors: raised when raise_error is set; otherwise usage is printed first
          (when print_usage) and the rendered error exits the process.
        - Warnings: emitted through the warnings module when raise_error is set;
          otherwise rendered to stderr.
        """
        fault = copy.replace(
            fault,
            **options,
            prog=self._prog(),
            shell=not self._raise_error,
            fancy=self._fancy,
            colorful=self._colorful
        )
        if isinstance(fault, ArgumentException) and not self._raise_error and self._usage_on_error:
            self.print_usage()
        trigger(fault)

    def get(self, kind, /, *path, default=None):
        """
        Typed lookup of an argument value.

        Forms
        - get(kind, name): argument of the default command.
        - get(kind, command, name): argument of a named command.

        Returns
        - the current value, else the declared default, else `default`. An unknown
          command, argument or kind, or a kind that does not match the argument's,
          also yields `default`.
        """
        match path:
            case (name,):
                command = self._default
            case (command, name):
                if (command := self._commands.get(command)) is None:
                    return default
            case _:
                raise TypeError("get() takes an argument name, optionally preceded by a command name")

        if (argument := command.get_argument(name)) is None:
            return default
        if (value := argument.value(kind)) is None:
            return default
        return value

    def _prog(self):
        name = os.path.basename(self._application_name or next(iter(sys.argv), ""))
        return getattr(__import__("__main__"), "__prog__", name or "argvector")

    def _synopsis(self, command, /):
        fragments = []
        for argument in command.optionals.values():
            aliases = "|".join(argument.aliases)
            if argument.kind is Kind.BOOLEAN:
                fragments.append("[%s]" % aliases)
            else:
                fragments.append("[%s <%s>]" % (aliases, argument.kind.value))
        for argument in command.positionals.values():
            fragments.append("<%s>" % argument.name)
        return fragments

    def usage(self):
        """
        Return plain-text usage lines, one per command (default command first).
        """
        prog = self._prog()
        lines = [" ".join(["usage:", prog, *self._synopsis(self._default)])]
        for name, command in self._commands.items():
            lines.append(" ".join(["      ", prog, name, *self._synopsis(command)]))
        return "\n".join(lines)

    def print_usage(self):
        """
        Render usage and an argument table per command to the stderr console.
        """
        def style(name):
            return {
                "usage-label": "bold #FF4DA6",
                "program-name": "bold #E6E6F0",
                "table-title": "bold #00E5FF",
                "argument": "#9CE19C",
                "kind": "#FFB400",
                "default": "dim",
            }.get(name, "") if self._colorful else ""

        prog = self._prog()
        renderables = [Text.assemble(
            ("usage: ", style("usage-label")),
            (prog, style("program-name")),
            " ",
            " ".join(self._synopsis(self._default))
        )]
        for name, command in self._commands.items():
            renderables.append(Text.assemble(
                "       ",
                (prog, style("program-name")),
                " ",
                (name, style("argument")),
                " ",
                " ".join(self._synopsis(command))
            ))
        if self._descr:
            renderables.append(Text(""))
            renderables.append(Text(str(self._descr)) if isinstance(self._descr, str) else self._descr)

        for command in (self._default, *self._commands.values()):
            arguments = [*command.positionals.values(), *command.optionals.values()]
            if not arguments:
                continue
            table = Table(
                title=Text(command.name if command is not self._default else "arguments", style("table-title")),
                title_justify="left",
                box=ROUNDED if self._fancy else None,
                show_header=False,
                padding=(0, 2),
            )
            for argument in arguments:
                table.add_row(
                    Text(", ".join(argument.aliases) or argument.name, style("argument")),
                    Text(argument.kind.value, style("kind")),
                    Text(argument.descr or "") if not isinstance(argument.descr, Text) else argument.descr,
                    Text("" if argument.default is None else "(default: %s)" % argument.default.value, style("default")),
                )
            renderables.append(table)

        renderable = Group(*renderables)
        if self._fancy:
            renderable = Panel(renderable, title=Text(prog.upper()), title_align="left")
        console.print(renderable)


__all__ = (
    "Parser",
)
