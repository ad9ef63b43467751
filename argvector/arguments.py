r"""
Argvector argument declarations.

Overview
- Argument: a single declared option or positional parameter carrying a scalar kind
  (see argvector.values.Kind), a canonical name, an optional short alias, a
  description and an optional default.

Naming rules (checked by validate())
- "--name": optional argument selected by the "--name" token (and the short alias).
  The canonical name is "name"; lookups use the canonical name.
- "name": positional argument, filled by position alone.
- "-name" and "---name": rejected (MalformedNameError).
- short alias: must start with exactly one dash ("-n"); "--n" or "n" is rejected
  (MalformedAliasError).

Lifecycle
- Construct declaratively, then validate() (Command.add_argument() validates for you).
- set_value(token) converts and stores the current value; the last write wins.
- value(kind) reads the current value, falling back to the default; a kind that does
  not match the declared one reads as absent (None) instead of failing.

Example
    >>> count = Argument("int", "--count", "-c", "how many times", default=1).validate()
    >>> count.name, count.aliases
    ('count', ('--count', '-c'))
    >>> count.set_value("42").value
    42
    >>> count.value("int"), count.value("long")
    (42, None)
"""
import copy

from rich.text import Text

from .faults import *
from .utils import *
from .values import Kind, TypedValue, accepts, converter, normalize, resolve


def _check_long_name(name, /):
    """
    Classify a declared name.

    Returns
    - (canonical, positional, aliases): canonical name without the "--" prefix,
      whether the argument is positional, and the long-form aliases.

    Raises
    - MalformedNameError: single dash, three or more dashes, or an empty name.
    """
    if name.startswith("--") and not name.startswith("---"):
        if not (canonical := name[2:]):
            raise MalformedNameError(
                "long argument name cannot be empty",
                title="malformed argument name",
                code=FaultCode.MALFORMED_NAME,
                input=name,
                hint="name the option after the dashes (for example: --name)"
            )
        return canonical, False, [name]
    if name.startswith("-"):
        raise MalformedNameError(
            "long argument must start with two or none dashes, got %r" % name,
            title="malformed argument name",
            code=FaultCode.MALFORMED_NAME,
            input=name,
            hint="use --%s for an option or %s for a positional" % ((name.lstrip("-"),) * 2)
        )
    if not name:
        raise MalformedNameError(
            "argument name cannot be empty",
            title="malformed argument name",
            code=FaultCode.MALFORMED_NAME,
            input=name,
            hint="give the argument a name"
        )
    return name, True, []


def _check_short_name(short, /):
    """
    Validate a short alias; an absent or empty alias contributes nothing.

    Raises
    - MalformedAliasError: the alias does not start with exactly one dash.
    """
    if not short:
        return []
    if not short.startswith("-") or short.startswith("--"):
        raise MalformedAliasError(
            "short argument must start with single dash, got %r" % short,
            title="malformed short argument",
            code=FaultCode.MALFORMED_ALIAS,
            input=short,
            hint="spell it with a single dash (for example: -%s)" % short.lstrip("-")[:1]
        )
    return [short]


class Argument(metaclass=Introspective):
    """
    Declared option or positional parameter.

    Properties
    - kind: Kind (a raw spelling until validated).
    - name: canonical name ("count" for "--count").
    - short: short alias or None.
    - descr: description or None.
    - default / current: TypedValue or None.
    - aliases: tokens selecting the argument on the command line (options only).
    - positional: True/False once validated, None before.
    - validated: whether validate() completed.
    """

    __introspectable__ = (
        "kind",
        "name",
        "short",
        "descr",
        "default",
        "current",
        "aliases",
        "positional",
        "validated",
    )

    __displayable__ = (
        "kind",
        "name",
        "aliases",
        "default",
        "current",
    )

    def __init__(self, kind, name, /, short=Unset, descr=Unset, default=Unset):
        """
        Declare an argument; nothing is checked beyond basic types until validate().

        Parameters
        - kind: Kind | str
          One of the scalar kinds (member or spelling, e.g. Kind.INT32 or "int").
        - name: str
          "--name" for an optional argument, "name" for a positional one.
        - short: Unset | str
          Short alias such as "-n".
        - descr: Unset | str | Text
          Short description shown by usage renderers.
        - default: Unset | Any
          Default value; must be a payload of `kind` (or a TypedValue of `kind`).
        """
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        if not isinstance(short, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'short' must be a string")
        if not isinstance(descr, str | Text | Unset):
            raise TypeError(f"{type(self).__typename__} 'descr' must be a string")

        self._kind = kind
        self._name = name
        self._short = coalesce(short) or None
        self._descr = coalesce(descr) or None
        self._declared = default
        self._default = None
        self._current = None
        self._aliases = []
        self._positional = None
        self._validated = False
        self._converter = Unset

    def validate(self):
        """
        Check the declaration and bind the converter.

        Steps (the first failure short-circuits the rest)
        1. long form: zero or exactly two leading dashes.
        2. short form: exactly one leading dash.
        3. converter binding: the kind must be supported.
        4. default: must be a payload of the declared kind.

        Idempotent: a validated argument is returned unchanged.

        Returns
        - self, for chaining.

        Raises
        - MalformedNameError, MalformedAliasError, UnsupportedTypeError, DefaultTypeError.
        """
        if self._validated:
            return self

        name, positional, aliases = _check_long_name(self._name)
        aliases += _check_short_name(self._short)

        try:
            convert = converter(self._kind)
        except UnsupportedTypeError as fault:
            raise copy.replace(fault, argument=self._name) from None
        kind = resolve(self._kind)

        default = self._declared
        if default is not Unset:
            if not accepts(kind, default):
                raise DefaultTypeError(
                    "invalid default value type, must be %r (argument %r)" % (kind.value, name),
                    title="invalid default value",
                    code=FaultCode.DEFAULT_TYPE_MISMATCH,
                    argument=name,
                    kind=kind,
                    input=default,
                    hint="declare a %s default or change the argument type" % kind.value
                )
            default = TypedValue(kind, normalize(kind, default))

        # Commit only once every check passed, so a failed validate() can be retried.
        self._kind = kind
        self._name = name
        self._positional = positional
        self._aliases = aliases
        self._converter = convert
        self._default = coalesce(default)
        self._validated = True
        return self

    def set_value(self, token, /):
        """
        Convert a token and store it as the current value (last write wins).

        Returns
        - the stored TypedValue.

        Raises
        - ConversionError (MalformedValueError/OutOfRangeError) annotated with the
          argument name; the current value is left untouched.
        """
        self.validate()
        try:
            value = self._converter(token)
        except ConversionError as fault:
            raise copy.replace(fault, argument=self._name) from None
        self._current = value
        return value

    def value(self, kind, /):
        """
        Read the current value, else the default, else None.

        A kind that differs from the declared one (or names no kind at all) reads
        as None; lookups never raise.
        """
        if not self._validated or resolve(kind) is not self._kind:
            return None
        if self._current is not None:
            return self._current.value
        if self._default is not None:
            return self._default.value
        return None

    def matches(self, token, /):
        return token in self._aliases

    def is_positional(self):
        return bool(self._positional)

    def type(self):
        return str(self._kind)


__all__ = (
    "Argument",
)
