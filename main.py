import signal
from datetime import timedelta
from typing import Annotated

from rich.pretty import pprint

from argbind import *

__prog__ = "serve"


class Serve:
    addr: Annotated[str, Flag("a,addr"), Env("ADDR", default=":8080")] = ""
    timeout: Annotated[timedelta, Flag("t,timeout"), Env("TIMEOUT")] = timedelta(seconds=30)
    tags: Annotated[list[str], Flag("tag"), Env("TAGS")] = []
    verbose: Annotated[bool, Flag("v,verbose")] = False

    def __init__(self):
        self.args = []

    def set_args(self, args):
        self.args = args

    def validate(self):
        if self.timeout <= timedelta(0):
            raise ValueError("timeout must be positive")

    def main(self, args, stdio):
        try:
            parse(args, self, envvars=True)
        except ParseException as exception:
            report(exception, file=stdio.stderr)
            return ExitCode.INVALID_ARGS
        except ValueError as exception:
            print(exception, file=stdio.stderr)
            return ExitCode.INVALID_ARGS

        context = cancel_on_signal(Context(), signal.SIGINT, signal.SIGTERM)
        pprint({"addr": self.addr, "timeout": self.timeout, "tags": self.tags, "args": self.args})
        if self.verbose:
            print("waiting for SIGINT or SIGTERM", file=stdio.stderr)
            context.wait()
        return ExitCode.SUCCESS


if __name__ == '__main__':
    run(Serve())
