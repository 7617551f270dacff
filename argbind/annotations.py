r"""
Argbind field annotations.

Overview
- Specs
  • Flag: the command-line aliases of a field, written as a comma-separated list
    (e.g., Flag("s,string") accepts -s, --s, -string and --string).
  • Env: the environment variable (suffix) seeding a field before flags apply.

- Attachment
  Both specs are attached to fields through typing.Annotated metadata:

    >>> from dataclasses import dataclass
    >>> from typing import Annotated
    >>> from argbind import Flag, Env
    >>> @dataclass
    ... class Config:
    ...     addr: Annotated[str, Flag("a,addr"), Env("ADDR")] = ":8080"
    ...     verbose: Annotated[bool, Flag("v,verbose")] = False

- Introspection & representation
  • AnnotationType metaclass provides stable __repr__/__rich_repr__ and exposes
    the sanitized metadata via read-only properties declared in __introspectable__.

Metadata (sanitized on construction)
- Flag
  • aliases: one or more strings, each possibly holding a comma-separated list.
    Aliases are trimmed and empty ones are dropped. An alias must not start with
    a dash, contain '=' or contain whitespace: such a name could never be typed.
    Repeated aliases are kept as declared and rejected later, at bind time.
- Env
  • name: the variable suffix (the parser prepends its prefix), non-empty.
  • default: textual value used when the variable is unset.
  • required: unset variable is an error (incompatible with default).
  • notempty: empty variable is an error.
  • separator: split character(s) for list fields (default ",").
  • expand: expand $VAR / ${VAR} references inside the value.

Public API
- Classes: Flag, Env
- Helpers: lookup(metadata, kind)
"""
import functools
import operator
import re
import typing
from typing import NamedTuple, Any

from .utils import *


class AnnotationType(type):
    """
    Metaclass that turns annotation specs into introspectable value objects.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - flag(aliases=('s', 'string'))
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers (e.g., rich).
            """
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_aliases(cls, aliases, /):
    """
    Internal: split, trim and validate flag aliases.

    Every entry may itself be a comma-separated list; the flattened result
    keeps declaration order. Empty aliases (after trimming) are dropped.

    Raises
    - TypeError: when an entry is not a string.
    - ValueError: when an alias starts with '-', contains '=' or whitespace.
    """
    sanitized = []
    for entry in aliases:
        if not isinstance(entry, str):
            raise TypeError(f"{cls.__typename__} aliases must be strings")
        for alias in entry.split(","):
            if not (alias := alias.strip()):
                continue
            if alias.startswith("-"):
                raise ValueError(f"{cls.__typename__} alias {alias!r} must be given without leading dashes")
            if "=" in alias or re.search(r"\s", alias):
                raise ValueError(f"{cls.__typename__} alias {alias!r} cannot contain '=' or whitespace")
            sanitized.append(alias)
    return tuple(sanitized)


class Flag(metaclass=AnnotationType):
    """
    Command-line aliases of an annotated field.

    The first alias is the canonical name: occurrences of any alias are
    reported under it (see Parser.parse). A Flag whose aliases are all empty
    binds nothing, as if the field carried no flag at all.
    """

    __introspectable__ = (
        "aliases",
    )

    def __init__(self, *aliases):
        self._aliases = _sanitize_aliases(type(self), aliases)

    @property
    def canonical(self):
        """
        The canonical (first) alias, or None when no alias survived trimming.
        """
        return self._aliases[0] if self._aliases else None

    def __eq__(self, other, /):
        if not isinstance(other, Flag):
            return NotImplemented
        return self._aliases == other._aliases

    def __hash__(self):
        return hash((Flag, self._aliases))


class Env(metaclass=AnnotationType):
    """
    Environment variable seeding an annotated field.

    The variable name is the parser's prefix followed by 'name'. Unset and
    empty variables leave the field untouched unless 'default', 'required'
    or 'notempty' say otherwise.
    """

    __introspectable__ = (
        "name",
        "default",
        "required",
        "notempty",
        "separator",
        "expand",
    )

    def __init__(
            self,
            name,
            /,
            *,
            default=Unset,
            required=False,
            notempty=False,
            separator=",",
            expand=False,
    ):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{type(self).__typename__} 'name' cannot be empty")
        elif "=" in name or re.search(r"\s", name):
            raise ValueError(f"{type(self).__typename__} 'name' cannot contain '=' or whitespace")

        if not isinstance(default, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'default' must be a string")
        if required and default is not Unset:
            raise TypeError(f"{type(self).__typename__} cannot be both 'required' and have a 'default'")

        if not isinstance(separator, str):
            raise TypeError(f"{type(self).__typename__} 'separator' must be a string")
        elif not separator:
            raise ValueError(f"{type(self).__typename__} 'separator' cannot be empty")

        self._name = name
        self._default = default
        self._required = bool(required)
        self._notempty = bool(notempty)
        self._separator = separator
        self._expand = bool(expand)

    def __eq__(self, other, /):
        if not isinstance(other, Env):
            return NotImplemented
        return tuple(self.__rich_repr__()) == tuple(other.__rich_repr__())

    def __hash__(self):
        return hash((Env, *(value for _, value in self.__rich_repr__())))


def lookup(metadata, kind, /, *, field):
    """
    Return the single spec of the given kind among Annotated metadata.

    Returns None when absent; raises TypeError when the field carries more
    than one spec of that kind, since it would be ambiguous which one binds.
    """
    found = [object for object in metadata if isinstance(object, kind)]
    if len(found) > 1:
        raise TypeError(f"field {field!r} declares more than one {kind.__typename__} annotation")
    return found[0] if found else None


class AnnotatedField(NamedTuple):
    name: str
    hint: Any
    flag: Flag | None
    env: Env | None


def ensure_structure(target, /):
    """
    Reject targets that cannot carry annotated fields.

    A structure is an instance of a user-defined class: classes themselves and
    builtin values (ints, strings, dicts, ...) are developer mistakes.
    """
    if isinstance(target, type) or type(target).__module__ == "builtins":
        raise TypeError(f"target must be an instance of an annotated class, not {type(target).__name__!r}")


def fields(target, /):
    """
    Yield the annotated fields of a structure, in declaration order.

    Fields come from the resolved type hints of the target's class (base
    classes first); ClassVar declarations are excluded, and so are fields
    carrying neither a Flag nor an Env annotation.
    """
    ensure_structure(target)
    for name, hint in typing.get_type_hints(type(target), include_extras=True).items():
        if typing.get_origin(hint) is typing.ClassVar:
            continue
        metadata = ()
        if typing.get_origin(hint) is typing.Annotated:
            hint, metadata = hint.__origin__, hint.__metadata__
        flag = lookup(metadata, Flag, field=name)
        env = lookup(metadata, Env, field=name)
        if flag is None and env is None:
            continue
        yield AnnotatedField(name, hint, flag, env)


__all__ = (
    "Flag",
    "Env",
    "AnnotatedField",
    "lookup",
    "ensure_structure",
    "fields",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del AnnotationType
