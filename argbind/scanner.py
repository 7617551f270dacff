r"""
Argbind argument scanner.

scan(tokens, bindings) walks the command-line tokens (program name excluded)
and alternates between two runs until the tokens are exhausted:

- flag run
  • a candidate is any token of two or more characters starting with '-'.
  • '--' alone terminates: every later token is positional, scanning stops.
  • one or two leading dashes are stripped ('-name' and '--name' are equal);
    a name that is then empty or starts with '-' or '=' is malformed.
  • 'name=value' carries an inline value.
  • boolean flags never consume the next token ('-b' means true, '-b=false'
    is allowed); other flags take the inline value or the next token, even
    when that token itself looks like a flag.
  • the run ends at the first token that is not a candidate.

- positional run
  • tokens are collected as positional arguments until one looks like a flag
    ('-x…', or '--x…' but never '---…'); the flag run resumes there.
  • '--' is dropped and every later token is appended verbatim.

Faults raised (all ParseException subclasses, first one aborts)
- MalformedFlagError: "bad flag syntax: <token>"
- UnknownFlagError:   "flag provided but not defined: -<name>"
- MissingValueError:  "flag needs an argument: -<name>"
- InvalidValueError:  "invalid value '<literal>' for flag -<name>: <reason>"

Warnings emitted
- EmptyValueWarning for 'name=' on a non-boolean flag (the empty value is
  still applied).
"""
import difflib
from collections import deque

from .faults import *

# Names conventionally asked for help; never handled specially, only hinted.
_HELP_NAMES = frozenset({"h", "help"})


def _looks_like_flag(token, /):
    """
    whether a token ends a positional run.
    """
    return len(token) > 1 and token.startswith("-") and not token.startswith("---")


def _unknown(name, bindings, /):
    if name in _HELP_NAMES:
        hint = "no help is built in; declare a %r flag to handle it" % name
    else:
        suggestions = difflib.get_close_matches(name, list(bindings.canonical), 3)
        hint = "did you mean '-%s'?" % suggestions[0] if suggestions else None
    return UnknownFlagError(
        "flag provided but not defined: -%s" % name,
        title="unknown flag",
        code=FaultCode.UNKNOWN_FLAG,
        hint=hint,
        flag=name,
        docs=getdoc(FaultCode.UNKNOWN_FLAG)
    )


def _invalid(name, literal, acceptor, error, /):
    if acceptor.boolean:
        message = "invalid boolean value %r for -%s: %s" % (literal, name, error)
    else:
        message = "invalid value %r for flag -%s: %s" % (literal, name, error)
    return InvalidValueError(
        message,
        title="invalid value",
        code=FaultCode.INVALID_VALUE,
        hint="check the expected format of '-%s'" % name,
        flag=name,
        literal=literal,
        docs=getdoc(FaultCode.INVALID_VALUE)
    )


def _parse_flags(tokens, bindings, visited, /):
    """
    consume a maximal run of flags from the left of the token deque.

    returns True when the '--' terminator was consumed (the caller then takes
    every remaining token as positional), False when the run ended on a
    non-flag token or on exhaustion.
    """
    while tokens:
        token = tokens[0]
        if len(token) < 2 or not token.startswith("-"):
            return False
        tokens.popleft()

        if token == "--":
            return True

        name = token[2:] if token.startswith("--") else token[1:]
        if not name or name[0] in "-=":
            raise MalformedFlagError(
                "bad flag syntax: %s" % token,
                title="malformed flag",
                code=FaultCode.MALFORMED_FLAG,
                hint="flags are written -name, --name, -name=value or --name=value",
                token=token,
                docs=getdoc(FaultCode.MALFORMED_FLAG)
            )

        name, equals, value = name.partition("=")
        inline = bool(equals)

        acceptor = bindings.lookup(name)
        if acceptor is None:
            raise _unknown(name, bindings)

        if acceptor.boolean:
            if not inline:
                value = "true"
        elif not inline:
            if not tokens:
                raise MissingValueError(
                    "flag needs an argument: -%s" % name,
                    title="missing value",
                    code=FaultCode.MISSING_VALUE,
                    hint="write '-%s <value>' or '-%s=<value>'" % (name, name),
                    flag=name,
                    docs=getdoc(FaultCode.MISSING_VALUE)
                )
            value = tokens.popleft()
        elif not value:
            warn(EmptyValueWarning(
                "empty value for flag -%s" % name,
                title="empty value",
                code=FaultCode.EMPTY_INLINE_VALUE,
                hint="'-%s=' sets an empty value; drop the '=' to pass the next argument instead" % name,
                flag=name
            ), stacklevel=4)

        try:
            acceptor(value)
        except ValueError as error:
            raise _invalid(name, value, acceptor, error) from error

        visited.add(bindings.canonicalize(name))
    return False


def scan(tokens, bindings, /):
    """
    Bind flags and collect positional arguments.

    Parameters
    - tokens: the command-line arguments, program name excluded.
    - bindings: the Bindings table of the target (see binding.bind).

    Returns
    - (args, visited): positional arguments in order, and the canonical names
      of every flag set on the command line.
    """
    tokens = deque(tokens)
    args = []
    visited = set()

    while tokens:
        if _parse_flags(tokens, bindings, visited):
            args.extend(tokens)
            break

        while tokens:
            token = tokens[0]
            if token == "--":
                tokens.popleft()
                args.extend(tokens)
                tokens.clear()
            elif _looks_like_flag(token):
                break
            else:
                args.append(tokens.popleft())

    return args, visited


__all__ = (
    "scan",
)
