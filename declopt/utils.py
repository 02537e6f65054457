"""
declopt utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the options, parser and faults layers.

Overview
- UnsetType / Unset
  • Singleton sentinel meaning "not provided", distinct from None, False, 0 and "".
  • Used wherever a legitimate user value (a default of 0, an empty description)
    must not be confused with "the caller said nothing".

- coalesce(value, default=None)
  • Replace Unset with a concrete default, preserving every other value.

- @rename("name")
  • Give generated callables a stable __name__/__qualname__ for readable reprs.

- mirror("attr")
  • Read-only property over a private backing field (self._attr); containers are
    handed out as tuples so declarations cannot be mutated through the public API.

Quick examples
    >>> coalesce(Unset, 0)
    0
    >>> coalesce(None, 0) is None
    True
"""
import functools
from collections.abc import Sequence, Set
from typing import final


@final
class UnsetType:
    """
    Type of the Unset sentinel: "the caller passed nothing".

    There is one instance per process. It is falsy, prints as "Unset", survives
    copy and pickle as itself, and can sit on the right of a PEP 604 union
    (str | Unset) for isinstance checks on parameters.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return 'default' when 'object' is Unset, 'object' otherwise (None, 0 and ""
    included).
    """
    return default if object is Unset else object


def rename(name, /):
    """
    Decorator setting __name__ and __qualname__ of a generated callable.

        @rename("__repr__")
        def __repr__(self): ...
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        if not callable(function):
            raise TypeError("rename() must decorate a callable")
        try:
            function.__name__ = function.__qualname__ = name
        except (AttributeError, TypeError):
            raise TypeError(f"rename() cannot rename {function!r}") from None
        return function

    return decorator


def _freeze(object):
    """
    Return a shallow immutable snapshot of a container value.

    - Sequence (non-string, non-tuple) → tuple
    - Set                   → frozenset
    - anything else         → returned as-is
    """
    if isinstance(object, Sequence) and not isinstance(object, str | tuple):
        return tuple(object)
    if isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the private attribute "_{name}".

    Example
    - Given self._spellings, declare spellings = mirror("spellings").
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


Unset = UnsetType()
"""
Internal sentinel for "not provided".

Use Unset as a parameter default when None (or 0, or "") is a meaningful user
value, then materialize it with coalesce().
"""


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
