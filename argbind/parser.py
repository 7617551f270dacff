"""
Argbind binding engine.

Parser reads command-line arguments (and, optionally, environment variables)
into the annotated fields of a target object, then hands the leftovers back
through the target's optional contract methods.

Order of operations for Parser.parse(args, target)
1. the target is checked (instance of an annotated class),
2. environment pass, when envvars is on (see environment.resolve),
3. with args present:
   • flag bindings are built (counting wraps them when set_flags_count exists),
   • args[1:] are scanned (see scanner.scan),
   • set_args(list), set_flags(set | None), set_flags_count(dict | None),
4. validate().

Contract methods are optional and detected one by one: any callable attribute
of that name is called. Exceptions raised by validate() propagate unchanged.
Nothing is ever printed; callers report faults themselves (see faults.report).
"""
from collections.abc import Sequence

from . import environment
from .annotations import ensure_structure
from .binding import ParseResult, bind
from .scanner import scan
from .utils import *


def _capability(target, name, /):
    """
    return the bound contract method 'name' of target, or None.
    """
    method = getattr(target, name, None)
    return method if callable(method) else None


class Parser:
    """
    Configured binding engine.

    Options
    - envvars: read Env-annotated fields from the environment (default False).
    - envprefix: variable-name prefix override; "-" disables prefixing; when
      unset (or empty) the prefix is derived from the program name.

    A Parser holds no state between calls and may be reused.
    """

    envvars = mirror("envvars")
    envprefix = mirror("envprefix")

    def __init__(self, *, envvars=False, envprefix=Unset):
        if not isinstance(envvars, bool):
            raise TypeError("parser 'envvars' must be a boolean")
        if not isinstance(envprefix, str | Unset):
            raise TypeError("parser 'envprefix' must be a string")
        self._envvars = envvars
        self._envprefix = envprefix

    def parse(self, args, target, /):
        """
        Parse args into target.

        Parameters
        - args: the full command line, program name first (like sys.argv).
        - target: an instance of an annotated class.

        Raises
        - TypeError: bad arguments, non-structure target, unsupported field
          type, duplicate flag alias.
        - ParseException subclasses: data-dependent parse failures.
        - whatever target.validate() raises.
        """
        if isinstance(args, str) or not isinstance(args, Sequence):
            raise TypeError("parse() 'args' must be a sequence of strings")
        if not all(isinstance(arg, str) for arg in args):
            raise TypeError("parse() 'args' must be a sequence of strings")
        ensure_structure(target)

        if self._envvars:
            environment.resolve(target, environment.effective_prefix(args, self._envprefix))

        if args:
            result = self._bind(args, target)
            if (method := _capability(target, "set_args")) is not None:
                method(result.args)
            if (method := _capability(target, "set_flags")) is not None:
                method(result.flags)
            if (method := _capability(target, "set_flags_count")) is not None:
                method(result.counts)

        if (method := _capability(target, "validate")) is not None:
            method()

    def _bind(self, args, target, /):
        """
        bind flags and scan args[1:], returning a ParseResult.
        """
        bindings = bind(target, counting=_capability(target, "set_flags_count") is not None)
        positionals, visited = scan(args[1:], bindings)
        return ParseResult(positionals, visited or None, bindings.counts)

    def __repr__(self):
        return f"parser(envvars={self._envvars!r}, envprefix={self._envprefix!r})"

    def __rich_repr__(self):
        yield "envvars", self._envvars
        yield "envprefix", self._envprefix


def parse(args, target, /, **options):
    """
    Shortcut for Parser(**options).parse(args, target).
    """
    return Parser(**options).parse(args, target)


__all__ = (
    "Parser",
    "parse",
)
