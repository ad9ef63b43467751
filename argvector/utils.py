"""
Argvector helpers shared by the declaration classes.

Contents
- Unset: the "argument omitted" marker used for keyword defaults where None is a
  legitimate value (an explicit default=None must stay distinguishable).
- coalesce(): turn Unset into a fallback, leaving every other value alone.
- rename(): give generated functions a readable __name__/__qualname__.
- mirror(): read-only property over a private "_name" slot; containers are handed
  out as views (mapping proxy, tuple, frozenset).
- Introspective: metaclass for Argument, Command and Parser.
"""
import builtins
import functools
import re
from collections.abc import Mapping, MutableSequence, MutableSet
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker.

    There is one instance per process, it is false in a boolean context, it
    prints as "Unset", and it can take part in `X | Unset` isinstance() checks.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __or__(self, other, /):
        try:
            return UnsetType | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | UnsetType
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return `default` when `object` is Unset, else `object` (None, 0 and "" included).
    """
    if object is Unset:
        return default
    return object


def rename(*parameters):
    """
    Name a callable, either directly or as a decorator.

        rename(function, "name")      # returns function, renamed
        @rename("name")               # decorator form
    """
    if len(parameters) == 1:
        name, = parameters
        if not isinstance(name, str):
            raise TypeError("rename() name must be a string")

        def decorator(function):
            return rename(function, name)

        return rename(decorator, "rename")

    if len(parameters) != 2:
        raise TypeError("rename() expects 1 or 2 arguments, got %d" % len(parameters))

    function, name = parameters
    if not builtins.callable(function):
        raise TypeError("rename() target must be callable")
    if not isinstance(name, str):
        raise TypeError("rename() name must be a string")
    try:
        function.__name__ = function.__qualname__ = name
    except (AttributeError, TypeError):
        raise TypeError("rename() target does not accept a new name") from None
    return function


def _view(object):
    # Containers are exposed read-only; everything else is already immutable.
    match object:
        case Mapping():
            return MappingProxyType(object)
        case MutableSequence():
            return tuple(object)
        case MutableSet():
            return frozenset(object)
    return object


def mirror(name, /):
    """
    Build a read-only property returning a view of `self._<name>`.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() name must be a string")

    def getter(self):
        return _view(getattr(self, "_" + name))

    return property(rename(getter, name))


class Introspective(type):
    """
    Metaclass for the public declaration classes.

    For a class listing attribute names in __introspectable__ it
    - adds one mirror() property per name,
    - sets __typename__ to the kebab-cased class name ("TypedThing" → "typed-thing"),
    - derives __repr__ and __rich_repr__ from __displayable__, falling back to
      __introspectable__ when __displayable__ is not set.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        properties = {field: mirror(field) for field in namespace.get("__introspectable__", ())}
        namespace = {
            **namespace,
            **properties,
            "__typename__": re.sub(r"(?<=.)([A-Z])", r"-\1", name).lower(),
        }
        self = super().__new__(cls, name, bases, namespace, **options)

        def __rich_repr__(self):
            fields = coalesce(type(self).__displayable__, type(self).__introspectable__)
            return ((field, getattr(self, field)) for field in fields)

        def __repr__(self):
            fields = ", ".join("%s=%r" % item for item in self.__rich_repr__())
            return "%s(%s)" % (type(self).__typename__, fields)

        self.__rich_repr__ = rename(__rich_repr__, "__rich_repr__")
        self.__repr__ = rename(__repr__, "__repr__")
        return self


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
    "Introspective",
)
