"""
Argvector command layer: named groups of arguments and token dispatch.

What this module provides
- Command: a named group of Arguments split into two collections:
  • positionals: filled strictly in declaration order through an internal cursor.
  • optionals: selected by any of their alias tokens ("--count", "-c").
  A command also carries an activation flag, set once the parser selects it.

Dispatch contract (used by argvector.parsers.Parser)
- set_optional_argument_value(token, tokens)
  • boolean options are flags: presence sets them to true, nothing is consumed.
  • other options take the next token from the deque, which must not start with a dash.
  • the value token is popped only after a successful conversion.
- set_positional_argument_value(token)
  • converts into the argument under the cursor; the cursor advances only on success.

Faults
- UnknownArgumentError: no option answers to the token.
- ExpectedArgumentError: a value-bearing option has no value token after it.
- UnexpectedPositionalError: every positional slot is already filled.
- DuplicatedArgumentError: add_argument(..., replace=False) on a taken name.
- ConversionError: forwarded from the argument, annotated with the command name.
- RepeatedArgumentWarning: an option given twice; the last value wins.
"""
import copy
import warnings

from rich.text import Text

from .arguments import Argument
from .faults import *
from .utils import *
from .values import Kind


class Command(metaclass=Introspective):
    """
    Named group of positional and optional arguments.

    Properties
    - name, descr: identity and help text.
    - active: whether the parser selected this command (never cleared).
    - positionals, optionals: read-only mappings in declaration order.
    - cursor: index of the next unfilled positional slot.
    """

    __introspectable__ = (
        "name",
        "descr",
        "active",
        "positionals",
        "optionals",
        "cursor",
    )

    __displayable__ = (
        "name",
        "descr",
        "active",
        "positionals",
        "optionals",
    )

    def __init__(self, name, /, descr=Unset):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{type(self).__typename__} 'name' cannot be empty")
        if not isinstance(descr, str | Text | Unset):
            raise TypeError(f"{type(self).__typename__} 'descr' must be a string")

        self._name = name
        self._descr = coalesce(descr) or None
        self._active = False
        self._positionals = {}
        self._optionals = {}
        self._cursor = 0

    def activate(self):
        self._active = True

    def is_active(self):
        return self._active

    def add_argument(self, argument, /, replace=True):
        """
        Register an argument under its canonical name.

        Behavior
        - Validates the argument first (see Argument.validate()).
        - Routes it to the positional or optional collection.
        - A taken name is overwritten in place when `replace` is true (the
          declaration slot, and thus the positional order, is kept); otherwise
          DuplicatedArgumentError is raised.

        Returns
        - the registered argument.
        """
        if not isinstance(argument, Argument):
            raise TypeError(f"{type(self).__typename__} argument must be an argument")
        argument.validate()

        arguments = self._positionals if argument.is_positional() else self._optionals
        if argument.name in arguments and not replace:
            raise DuplicatedArgumentError(
                "%r: already exists" % argument.name,
                title="duplicated argument",
                code=FaultCode.DUPLICATED_ARGUMENT,
                command=self._name,
                argument=argument.name,
                hint="rename the argument or register it with replace=True"
            )
        arguments[argument.name] = argument
        return argument

    def get_argument(self, name, /):
        """
        Look an argument up by canonical name, positionals first; None when absent.
        """
        try:
            return self._positionals[name]
        except (KeyError, TypeError):
            pass
        try:
            return self._optionals[name]
        except (KeyError, TypeError):
            return None

    def set_optional_argument_value(self, token, tokens, /):
        """
        Assign the option selected by `token`, consuming its value from `tokens`.

        Parameters
        - token: str
          The option token as typed ("--count", "-c").
        - tokens: collections.deque[str]
          Remaining tokens; the value token is popped only on success.

        Raises
        - UnknownArgumentError, ExpectedArgumentError, ConversionError.
        """
        for argument in self._optionals.values():
            if not argument.matches(token):
                continue

            repeated = argument.current is not None

            if argument.kind is Kind.BOOLEAN:
                argument.set_value("true")
            elif not tokens or tokens[0].startswith("-"):
                raise ExpectedArgumentError(
                    "%r: expected argument" % token,
                    title="missing option value",
                    code=FaultCode.EXPECTED_ARGUMENT,
                    input=token,
                    command=self._name,
                    argument=argument.name,
                    kind=argument.kind,
                    hint="pass a %s value after %s (for example: %s <value>)" % (argument.kind.value, token, token)
                )
            else:
                try:
                    argument.set_value(tokens[0])
                except ConversionError as fault:
                    raise copy.replace(fault, command=self._name) from None
                tokens.popleft()

            if repeated:
                warnings.warn(RepeatedArgumentWarning(
                    "option %r was already provided, the last value wins" % token,
                    title="repeated option",
                    code=FaultCode.REPEATED_ARGUMENT,
                    input=token,
                    command=self._name,
                    argument=argument.name,
                    hint="keep a single %s" % token
                ), stacklevel=2)
            return

        raise UnknownArgumentError(
            "unknown argument %r" % token,
            title="unknown argument",
            code=FaultCode.UNKNOWN_ARGUMENT,
            input=token,
            command=self._name,
            hint="known options: %s" % (", ".join(
                alias for argument in self._optionals.values() for alias in argument.aliases
            ) or "none")
        )

    def set_positional_argument_value(self, token, /):
        """
        Assign `token` to the next unfilled positional slot.

        Raises
        - UnexpectedPositionalError: no positional slot is left.
        - ConversionError: the token does not convert; the cursor stays put.
        """
        if self._cursor >= len(self._positionals):
            raise UnexpectedPositionalError(
                "%r: unknown argument" % token,
                title="unexpected positional",
                code=FaultCode.UNEXPECTED_POSITIONAL,
                input=token,
                command=self._name,
                hint="remove this extra value (%d positional argument%s expected)" % (
                    len(self._positionals), "" if len(self._positionals) == 1 else "s"
                )
            )

        argument = list(self._positionals.values())[self._cursor]
        try:
            argument.set_value(token)
        except ConversionError as fault:
            raise copy.replace(fault, command=self._name) from None
        self._cursor += 1


__all__ = (
    "Command",
)
