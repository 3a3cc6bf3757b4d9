"""Feed input files one by one to a fuzz target, without any fuzzing."""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import TextIO


def run_inputs(
    target: Callable[[bytes], object],
    paths: Iterable[str],
    initialize: Callable[[list[str]], object] | None = None,
    log: TextIO | None = None,
) -> list[int]:
    """Run ``target`` on the contents of each file; return the sizes read.

    ``initialize``, when given, is called once with the list of paths before
    anything runs and may change that list in place.
    """
    out = sys.stderr if log is None else log
    inputs = [str(p) for p in paths]
    out.write(f"running {len(inputs)} inputs\n")
    if initialize is not None:
        initialize(inputs)
    sizes = []
    for path in inputs:
        out.write(f"Running: {path}\n")
        data = Path(path).read_bytes()
        target(data)
        sizes.append(len(data))
        out.write(f"Done:    {path}: ({len(data)} bytes)\n")
    return sizes