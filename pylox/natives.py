from __future__ import annotations
import time
from .runtime import NativeFunction


def install_natives(interp):
    """Define the built-in functions in the interpreter's global environment."""
    g = interp.globals

    def _nf(name, arity, fn):
        g.define(name, NativeFunction(name, arity, fn))

    def _clock(args):
        return time.time()

    def _read_line(args):
        line = interp.stdin.readline()
        # readline() yields "" at end of input, which is what readLine returns too
        return line.rstrip("\r\n")

    _nf("clock", 0, _clock)
    _nf("readLine", 0, _read_line)
