"""
Argbind faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every recoverable parse
  issue (errors and warnings). Codes are grouped by domain so that logs and
  searches stay predictable.
- ParseException / ParseWarning: base types that carry message + options and
  know how to render themselves with rich (header, body, hint).
- report(): caller-side helper printing any fault on a rich console.
- getdoc(): optional description lookup for a code from the host application.

Split of responsibilities
- The binding engine only raises parse exceptions (and emits warnings through
  the warnings module); it never prints. Rendering is the caller's decision,
  typically an entrypoint catching ParseException and calling report().
- Configuration mistakes (bad annotations, unsupported field types, duplicate
  flag names) are not faults: they are raised as TypeError/ValueError at bind
  time and are meant to be fixed in code, not reported to users.

Host configuration (read from __main__, all optional)
- __codes__: mapping FaultCode → label used by FaultCode.normalize().
- __styles__: mapping style-name → rich style overriding the defaults.
- __prog__: program label shown in the header when no "prog" option is given.
- __docs__: mapping FaultCode → documentation string used by getdoc().
"""
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - flags (211xx)
      • MALFORMED_FLAG, UNKNOWN_FLAG, MISSING_VALUE, INVALID_VALUE
    - environment (212xx)
      • INVALID_ENVIRONMENT, MISSING_ENVIRONMENT, EMPTY_ENVIRONMENT
    - warnings (221xx)
      • EMPTY_INLINE_VALUE

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- flag errors (211xx) ---
    MALFORMED_FLAG              = 21101
    UNKNOWN_FLAG                = 21102
    MISSING_VALUE               = 21103
    INVALID_VALUE               = 21104

    # --- environment errors (212xx) ---
    INVALID_ENVIRONMENT         = 21201
    MISSING_ENVIRONMENT         = 21202
    EMPTY_ENVIRONMENT           = 21203

    # --- warnings (221xx) ---
    EMPTY_INLINE_VALUE          = 22101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


_ERROR_STYLES = {
    "prog-name": "bold #E6E6F0",  # near-white program name
    "code": "bold #00E5FF",  # neon cyan fault code
    "title": "bold #FF4DA6",  # friendly pinky title
    "message": "#C8C8D0",  # soft light gray message
    "hint-arrow": "#9CE19C dim",  # gentle green arrow
    "hint": "italic #9CE19C",  # gentle green hint text
}

_WARNING_STYLES = {
    "prog-name": "bold #E6E6F0",
    "code": "bold #FFB400",  # amber fault code for warnings
    "title": "bold #FFC2E0",  # softer pinky title for warnings
    "message": "#D6D6DE",
    "hint-arrow": "#B8EFAF dim",
    "hint": "italic #B8EFAF",
}


def _render(fault, defaults, /):
    """
    build the rich renderable shared by exceptions and warnings.

    layout
    - header: "[ prog — code | title ]"
    - body:   the fault message
    - hint:   " → hint" (omitted when the fault carries no hint)

    options honored: prog, code, title, hint, colorful (default True) and
    fancy (default False, wraps everything in a titled panel).
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", True)
    styles = defaultdict(str, defaults | getattr(main, "__styles__", {}))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        return Text(str(fragment), styles[style])

    prog = options.get("prog", getattr(main, "__prog__", "argbind"))
    code = options.get("code")

    header = Text.assemble(
        "[ ",
        text(prog, "prog-name"),
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else code, "code"),
        " | ",
        text(str(options.get("title", type(fault).__name__)).title(), "title"),
        " ]"
    )
    parts = [text(fault.message, "message")]
    if hint := options.get("hint"):
        parts.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

    if options.get("fancy", False):
        return Panel(Group(*parts), title=header, title_align="left")
    return Group(header, *parts)


class ParseException(Exception):
    """
    base class of every recoverable parse error raised by the binding engine.

    attributes
    - message: the one-line, lowercased description (also str(exception)).
    - options: read-only mapping of context (title, code, hint, flag, literal,
      variable, field, ...), used for rendering and by callers for inspection.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, _ERROR_STYLES)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        replaced = type(self)(self.message, **{**self.options, **overrides})
        replaced.__cause__ = self.__cause__
        return replaced


class MalformedFlagError(ParseException): ...
class UnknownFlagError(ParseException): ...
class MissingValueError(ParseException): ...
class CoercionError(ParseException): ...
class InvalidValueError(CoercionError): ...
class InvalidEnvironmentError(CoercionError): ...
class MissingEnvironmentError(ParseException): ...
class EmptyEnvironmentError(ParseException): ...


class ParseWarning(Warning):
    """
    base class of soft parse issues; emitted with warnings.warn, never raised.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, _WARNING_STYLES)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class EmptyValueWarning(ParseWarning): ...


def warn(warning, /, *, stacklevel=2):
    """
    emit a parse warning through the warnings machinery.
    """
    if not isinstance(warning, ParseWarning):
        raise TypeError("warn() argument must be a parse warning")
    warnings.warn(warning, stacklevel=stacklevel + 1)


def report(fault, /, file=None, **options):
    """
    print a fault with the given rendering options.

    contract
    - fault must provide __rich__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before
      printing (e.g., prog="tool", colorful=False, fancy=True).
    - file defaults to the process standard error.
    """
    if (
        not hasattr(fault, "__rich__") or
        not callable(fault.__rich__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("report() argument must have a __rich__ and __replace__ methods")
    console = Console(stderr=True) if file is None else Console(file=file)
    console.print(fault.__replace__(**options) if options else fault)


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings; when
    not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "ParseException",
    "MalformedFlagError",
    "UnknownFlagError",
    "MissingValueError",
    "CoercionError",
    "InvalidValueError",
    "InvalidEnvironmentError",
    "MissingEnvironmentError",
    "EmptyEnvironmentError",
    "ParseWarning",
    "EmptyValueWarning",
    "warn",
    "report",
    "getdoc",
)
