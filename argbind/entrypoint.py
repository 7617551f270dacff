"""
Argbind entrypoint collaborators.

Small pieces a command's main function is built from:

- ExitCode: process exit codes (SUCCESS, FAILURE, INVALID_ARGS).
- Stdio / current_stdio(): the working directory and standard streams of a
  command, bundled so tests can substitute their own.
- Context / cancel_on_signal(): a cancellable context, cancelled when the
  process receives one of the given signals.
- run(command): call command.main(args, stdio) and exit with its code.

Typical use

    >>> class Command:
    ...     verbose: Annotated[bool, Flag("v,verbose")] = False
    ...
    ...     def main(self, args, stdio):
    ...         try:
    ...             parse(args, self, envvars=True)
    ...         except ParseException as exception:
    ...             report(exception)
    ...             return ExitCode.INVALID_ARGS
    ...         return ExitCode.SUCCESS
    ...
    >>> run(Command())
"""
import os
import signal
import sys
import threading
from collections import defaultdict
from enum import IntEnum
from typing import NamedTuple, TextIO

from .utils import *

# Signal number → contexts cancelled on its next receipt.
_WAITERS = defaultdict(list)


class ExitCode(IntEnum):
    SUCCESS = 0
    FAILURE = 1
    INVALID_ARGS = 2


class Stdio(NamedTuple):
    cwd: str
    stdin: TextIO
    stdout: TextIO
    stderr: TextIO


def current_stdio():
    """
    Snapshot the working directory and standard streams of the process.

    cwd reflects the working directory at the time of the call.
    """
    return Stdio(os.getcwd(), sys.stdin, sys.stdout, sys.stderr)


class Context:
    """
    Cancellable context.

    A context is cancelled explicitly with cancel(), or when its parent is.
    Cancellation is one-way and idempotent; cancelling a child never affects
    its parent.
    """

    parent = mirror("parent")

    def __init__(self, parent=None, /):
        if parent is not None and not isinstance(parent, Context):
            raise TypeError("context 'parent' must be a context")
        self._parent = parent
        self._event = threading.Event()
        self._children = []
        self._lock = threading.Lock()
        if parent is not None:
            parent._adopt(self)

    def _adopt(self, child, /):
        with self._lock:
            if not self._event.is_set():
                self._children.append(child)
                return
        child.cancel()

    def cancel(self):
        """
        Cancel this context and every context derived from it.
        """
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            children, self._children = self._children, []
        for child in children:
            child.cancel()

    @property
    def cancelled(self):
        return self._event.is_set()

    def wait(self, timeout=None):
        """
        Block until cancelled or until timeout seconds have elapsed.

        Returns whether the context is cancelled.
        """
        return self._event.wait(timeout)

    def __repr__(self):
        return f"context(cancelled={self.cancelled!r})"


def _dispatch(signum, frame, /):
    """
    cancel every context waiting for signum.
    """
    for context in _WAITERS.pop(signum, ()):
        context.cancel()


def cancel_on_signal(context, /, *signals):
    """
    Return a context cancelled when the process receives one of the signals.

    With no signals the given context is returned as is. Otherwise a child
    context is returned and registered for every signal. One shared handler
    per signal cancels all contexts registered for it, so several calls for
    the same signal each get cancelled. The handler replaces any previous one
    (including the default action). Must be called from the main thread.
    """
    if not isinstance(context, Context):
        raise TypeError("cancel_on_signal() first argument must be a context")
    if not signals:
        return context

    child = Context(context)
    for signum in signals:
        _WAITERS[signum].append(child)
        if signal.getsignal(signum) is not _dispatch:
            signal.signal(signum, _dispatch)
    return child


def run(command, /, args=Unset, stdio=Unset):
    """
    Run a command's main entrypoint and exit the process with its code.

    args defaults to sys.argv and stdio to current_stdio().
    """
    if not callable(getattr(command, "main", None)):
        raise TypeError("run() argument must have a main method")
    code = command.main(coalesce(args, sys.argv), coalesce(stdio) or current_stdio())
    sys.exit(int(code))


__all__ = (
    "ExitCode",
    "Stdio",
    "current_stdio",
    "Context",
    "cancel_on_signal",
    "run",
)
