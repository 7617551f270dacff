"""
Argbind environment resolver.

Fields annotated with Env are seeded from environment variables before any
flag is parsed, so command-line values always win.

Variable names are the prefix followed by the annotation name. The prefix is
- the explicit override given to the parser, "-" meaning no prefix at all;
- otherwise derived from the program path (args[0]): base name, extension
  stripped, upper-cased, '-' replaced by '_', then '_' appended, e.g.
  "/usr/local/bin/my-tool.py" → "MY_TOOL_".

Per variable
- unset:   the annotation default is used when given; 'required' raises
           MissingEnvironmentError; otherwise the field is left untouched.
- empty:   'notempty' raises EmptyEnvironmentError; otherwise untouched.
- set:     $VAR / ${VAR} references are expanded when 'expand' is on, then the
           value is coerced and assigned (list fields are split on the
           separator and replaced). Bad text raises InvalidEnvironmentError.
"""
import os
import re

from .annotations import fields
from .coercion import resolve as coerce
from .faults import *
from .utils import *

SENTINEL = "-"

_REFERENCE = re.compile(r"\$(?:\{(?P<braced>[^}]*)\}|(?P<plain>[A-Za-z_][A-Za-z0-9_]*))")


def derive_prefix(program, /):
    """
    Derive the variable prefix from a program path.

    The extension starts at the last dot of the base name, so a dotfile name
    (".tool") is all extension. Returns "" when the path has no usable stem.
    """
    stem, dot, _ = os.path.basename(program).rpartition(".")
    if not dot:
        stem = os.path.basename(program)
    if not stem:
        return ""
    return stem.upper().replace("-", "_") + "_"


def effective_prefix(args, envprefix=Unset, /):
    """
    Return the prefix in force for one parse call.
    """
    if envprefix is not Unset and envprefix:
        return "" if envprefix == SENTINEL else envprefix
    if not args:
        return ""
    return derive_prefix(args[0])


def _expand(text, environ, /):
    """
    expand $VAR and ${VAR} references; unknown variables expand to "".
    """
    return _REFERENCE.sub(lambda match: environ.get(match["braced"] or match["plain"], ""), text)


def resolve(target, prefix, /, environ=None):
    """
    Assign every Env-annotated field of target from the environment.

    Parameters
    - target: an instance of an annotated class.
    - prefix: the variable-name prefix (see effective_prefix).
    - environ: mapping to read from, os.environ by default.

    Raises
    - MissingEnvironmentError / EmptyEnvironmentError / InvalidEnvironmentError
    - TypeError for unsupported field types.
    """
    environ = os.environ if environ is None else environ

    for field in fields(target):
        if (spec := field.env) is None:
            continue
        coercion = coerce(field.hint, field=field.name)
        variable = prefix + spec.name

        if (value := environ.get(variable)) is None:
            if spec.required:
                raise MissingEnvironmentError(
                    "required environment variable %s is not set (field %r)" % (variable, field.name),
                    title="missing environment variable",
                    code=FaultCode.MISSING_ENVIRONMENT,
                    hint="export %s before running the program" % variable,
                    variable=variable,
                    field=field.name,
                    docs=getdoc(FaultCode.MISSING_ENVIRONMENT)
                )
            if spec.default is Unset:
                continue
            value = spec.default

        if spec.expand:
            value = _expand(value, environ)

        if not value:
            if spec.notempty:
                raise EmptyEnvironmentError(
                    "environment variable %s should not be empty (field %r)" % (variable, field.name),
                    title="empty environment variable",
                    code=FaultCode.EMPTY_ENVIRONMENT,
                    hint="give %s a value or unset it" % variable,
                    variable=variable,
                    field=field.name,
                    docs=getdoc(FaultCode.EMPTY_ENVIRONMENT)
                )
            continue

        try:
            coercion.load(target, field.name, value, spec.separator)
        except ValueError as error:
            raise InvalidEnvironmentError(
                "invalid value %r for environment variable %s (field %r): %s" % (value, variable, field.name, error),
                title="invalid environment value",
                code=FaultCode.INVALID_ENVIRONMENT,
                hint="check the expected format of %s" % variable,
                variable=variable,
                field=field.name,
                literal=value,
                docs=getdoc(FaultCode.INVALID_ENVIRONMENT)
            ) from error


__all__ = (
    "SENTINEL",
    "derive_prefix",
    "effective_prefix",
    "resolve",
)
