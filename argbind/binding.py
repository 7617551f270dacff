"""
Argbind field bindings: annotation scanning and occurrence tracking.

What this module provides
- bind(target, counting=False): walk the target's annotated fields once and
  build the Bindings table used by the argument scanner:
  • one FieldBinding per field carrying a Flag annotation,
  • the canonical-name map (every alias → first alias of its field),
  • one acceptor per alias, storing textual values into the field.
- Acceptor / CountingAcceptor: the field setter and its counting decorator.
- ParseResult: what one parse call reports back to the target.

Rules
- Aliases are unique across the whole target: an alias seen twice (on two
  fields, or twice on the same field) raises TypeError before any argument is
  read. Silent overwrite is never performed.
- Coercions are resolved here, once per field per call; unsupported field
  types raise TypeError naming the field and its type.
- With counting enabled, every acceptor is wrapped so that each occurrence is
  counted under the canonical name before the value is stored. Environment
  values never go through acceptors and are therefore never counted.
"""
from collections import Counter
from typing import NamedTuple

from .annotations import fields
from .coercion import Coercion, resolve
from .utils import *


class FieldBinding(NamedTuple):
    field: str
    aliases: tuple[str, ...]
    canonical: str
    coercion: Coercion


class ParseResult(NamedTuple):
    args: list[str]
    flags: set[str] | None
    counts: dict[str, int] | None


class Acceptor:
    """
    Store textual values into one field of the target.
    """
    __slots__ = ("_target", "_field", "_coercion")

    field = mirror("field")
    coercion = mirror("coercion")

    def __init__(self, target, field, coercion, /):
        self._target = target
        self._field = field
        self._coercion = coercion

    @property
    def boolean(self):
        return self._coercion.boolean

    def __call__(self, text, /):
        self._coercion.apply(self._target, self._field, text)


class CountingAcceptor:
    """
    Count occurrences under a canonical name, then delegate to the inner acceptor.
    """
    __slots__ = ("_inner", "_canonical", "_counter")

    inner = mirror("inner")
    canonical = mirror("canonical")

    def __init__(self, inner, canonical, counter, /):
        self._inner = inner
        self._canonical = canonical
        self._counter = counter

    @property
    def boolean(self):
        return self._inner.boolean

    def __call__(self, text, /):
        self._counter[self._canonical] += 1
        return self._inner(text)


class Bindings:
    """
    Flag table of one target for one parse call.

    Attributes
    - fields: the FieldBinding of every flag-annotated field, in order.
    - canonical: alias → canonical name.
    - counts: occurrences per canonical name, or None when nothing was
      counted (or counting is disabled).
    """

    canonical = mirror("canonical")

    def __init__(self):
        self._fields = []
        self._canonical = {}
        self._acceptors = {}
        self._counter = None

    def register(self, binding, acceptor, /):
        """
        Register every alias of a field binding with the same acceptor.
        """
        for alias in binding.aliases:
            if alias in self._acceptors:
                raise TypeError(f"field {binding.field!r} flag {alias!r} is already in use (flag redefined: {alias})")
            self._canonical[alias] = binding.canonical
            self._acceptors[alias] = acceptor
        self._fields.append(binding)

    def track(self):
        """
        Wrap every registered acceptor with a CountingAcceptor.
        """
        if self._counter is not None:
            return
        self._counter = Counter()
        for alias, acceptor in self._acceptors.items():
            self._acceptors[alias] = CountingAcceptor(acceptor, self._canonical[alias], self._counter)

    def lookup(self, alias, /):
        """
        Return the acceptor registered for an alias, or None.
        """
        return self._acceptors.get(alias)

    def canonicalize(self, alias, /):
        return self._canonical[alias]

    @property
    def fields(self):
        return tuple(self._fields)

    @property
    def counts(self):
        if not self._counter:
            return None
        return dict(self._counter)

    def __contains__(self, alias, /):
        return alias in self._acceptors

    def __repr__(self):
        return f"bindings(canonical={self._canonical!r})"


def bind(target, /, *, counting=False):
    """
    Build the Bindings table of a target structure.

    Parameters
    - target: an instance of an annotated class.
    - counting: wrap acceptors with occurrence counting.

    Raises
    - TypeError: non-structure target, unsupported field type, duplicate alias.
    """
    bindings = Bindings()
    for field in fields(target):
        if field.flag is None or field.flag.canonical is None:
            continue
        coercion = resolve(field.hint, field=field.name)
        binding = FieldBinding(field.name, field.flag.aliases, field.flag.canonical, coercion)
        bindings.register(binding, Acceptor(target, field.name, coercion))
    if counting:
        bindings.track()
    return bindings


__all__ = (
    "FieldBinding",
    "ParseResult",
    "Acceptor",
    "CountingAcceptor",
    "Bindings",
    "bind",
)
