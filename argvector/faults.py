"""
Argvector faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain to keep copy consistent and logs searchable.
- ArgumentException / ArgumentWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased, actionable way.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).

Taxonomy
- DeclarationError: malformed names/aliases, unsupported types, bad defaults,
  duplicated arguments. Raised while declaring, before any parsing.
- ConversionError: a token that cannot become a value of the declared kind.
- UsageError: unknown options, missing option values, surplus positionals.

Integration
- Core code raises faults and enriches them on the way up with copy.replace(fault, **context).
- The parser hands them to trigger(): outside shell mode the fault is raised, in
  shell mode it is rendered with rich on stderr and the process exits.
"""
import copy
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - declarations (101xx)
      • MALFORMED_NAME, MALFORMED_ALIAS, UNSUPPORTED_TYPE, DEFAULT_TYPE_MISMATCH,
        DUPLICATED_ARGUMENT
    - usage (111xx)
      • UNKNOWN_ARGUMENT, EXPECTED_ARGUMENT, UNEXPECTED_POSITIONAL
    - conversions (1113x)
      • MALFORMED_VALUE, VALUE_OUT_OF_RANGE
    - warnings (121xx)
      • REPEATED_ARGUMENT

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- declaration errors (101xx) ---
    MALFORMED_NAME              = 10101
    MALFORMED_ALIAS             = 10102
    UNSUPPORTED_TYPE            = 10111
    DEFAULT_TYPE_MISMATCH       = 10112
    DUPLICATED_ARGUMENT         = 10121

    # --- usage errors (111xx) ---
    UNKNOWN_ARGUMENT            = 11112
    EXPECTED_ARGUMENT           = 11117
    UNEXPECTED_POSITIONAL       = 11121

    # --- conversion errors (1113x) ---
    MALFORMED_VALUE             = 11131
    VALUE_OUT_OF_RANGE          = 11132

    # --- warnings (121xx) ---
    REPEATED_ARGUMENT           = 12115

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _renderer(fault, palette, title_style, message_style):
    """
    Build the shared header/message/hint renderable for faults.

    Options read from the fault
    - colorful, fancy: presentation switches (default off).
    - prog: program label; __prog__ in __main__ wins, then the option, then "argvector".
    - code, title, hint: header and footer copy.
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", False)
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style] if colorful else "")

    prog = getattr(main, "__prog__", options.get("prog") or "argvector")
    code = options.get("code")

    header = Text.assemble(
        "[ ",
        text(prog, "prog-name"),
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else "-", "code"),
        " | ",
        text(str(options.get("title", type(fault).__name__)).title(), title_style),
        " ]"
    )
    message = text(fault.message, message_style)
    renderables = [message]
    if hint := options.get("hint"):
        renderables.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

    if options.get("fancy", False):
        return Panel(Group(*renderables), title=header, title_align="left")
    return Group(header, *renderables)


class ArgumentException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _renderer(self, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            # body
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        }, "error-title", "error-message")

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DeclarationError(ArgumentException): ...
class MalformedNameError(DeclarationError): ...
class MalformedAliasError(DeclarationError): ...
class UnsupportedTypeError(DeclarationError): ...
class DefaultTypeError(DeclarationError): ...
class DuplicatedArgumentError(DeclarationError): ...

class ConversionError(ArgumentException): ...
class MalformedValueError(ConversionError): ...
class OutOfRangeError(ConversionError): ...

class UsageError(ArgumentException): ...
class UnknownArgumentError(UsageError): ...
class UnexpectedPositionalError(UnknownArgumentError): ...
class ExpectedArgumentError(UsageError): ...


class ArgumentWarning(Warning):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _renderer(self, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "warning-title": "bold #FFC2E0",
            # body
            "warning-message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        }, "warning-title", "warning-message")

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=3)
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class RepeatedArgumentWarning(ArgumentWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode, rendering happens via the rich console; otherwise exceptions are
      raised and warnings are emitted through the warnings module.

    typical options
    - prog, shell, fancy, colorful, title, code, hint, and any context the reporter
      may want to show (input, argument, command, kind, cause).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "ArgumentException",
    "DeclarationError",
    "MalformedNameError",
    "MalformedAliasError",
    "UnsupportedTypeError",
    "DefaultTypeError",
    "DuplicatedArgumentError",
    "ConversionError",
    "MalformedValueError",
    "OutOfRangeError",
    "UsageError",
    "UnknownArgumentError",
    "UnexpectedPositionalError",
    "ExpectedArgumentError",
    "ArgumentWarning",
    "RepeatedArgumentWarning",
    "trigger",
)
