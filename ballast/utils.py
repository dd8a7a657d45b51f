"""
Ballast helpers shared by the definition, coercion and parser layers.

Contents
- Unset: the "not provided" sentinel. Parameters such as declared defaults
  accept None, 0 or "" as real values, so absence needs its own marker.
- coalesce(): turn Unset into a fallback and leave every other value alone.
- rename(): decorator giving generated functions a readable __name__.
- mirror(): read-only property over a private "_" field; containers are handed
  out as copies so registries cannot be edited from outside.

    >>> coalesce(Unset, 1), coalesce(0, 1)
    (1, 0)
"""
import functools
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Type of the Unset sentinel; calling it always yields the same instance.

    Unset is falsy, reprs as "Unset", survives copy/deepcopy, and can take part
    in isinstance unions such as `str | Unset`.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

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


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    `default` when `object` is Unset, otherwise `object` (None included).
    """
    if object is Unset:
        return default
    return object


def rename(name, /):
    """
    Decorator setting both __name__ and __qualname__ of a function.

        @rename("__repr__")
        def __repr__(self): ...
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        if not callable(function):
            raise TypeError("rename() must be applied to a callable")
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _detached(object):
    # lists, dicts and sets are rebuilt recursively, strings and scalars kept
    match object:
        case str():
            return object
        case Mapping():
            return {key: _detached(value) for key, value in object.items()}
        case Sequence():
            return [_detached(value) for value in object]
        case Set():
            return {_detached(value) for value in object}
        case _:
            return object


def mirror(name, /):
    """
    Read-only property exposing `self._<name>`.

    Given `self._values = [...]`, declaring `values = mirror("values")` on the
    class makes `obj.values` return a fresh list on every access.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _detached(getattr(self, "_" + name))

    return property(getter)


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
