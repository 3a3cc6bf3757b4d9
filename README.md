# fuzzcore

This package provides building blocks for a coverage-guided fuzzer. It is
plain Python and has no third-party dependencies.

## Modules

- `fuzzcore.rand.Random` is a deterministic minimal-standard linear
  congruential generator. Its methods:
  - `raw()`
  - `below(n)`: returns 0 when `n` is 0.
  - `between(start, stop)`: the range is inclusive. It raises `ValueError`
    unless `start < stop`.
  - `rand_bool()`
  - `skew_towards_last(n)`
- `fuzzcore.builtins` has `bswap(value, width)`, `clzll(value)` and
  `popcountll(value)` for fixed-width unsigned integers. Out-of-range input
  raises `ValueError`.
- `fuzzcore.bitmap.ValueBitMap` is a map of 65536 bits.
  - `add_value` and `add_value_mod_prime` return True when they set a new bit.
  - `get(idx)` reads one bit, and `reset()` clears the map.
  - Iterating over the map yields the indices of the set bits in increasing
    order.
- `fuzzcore.options.FuzzingOptions` is a dataclass that holds every fuzzing
  setting with its default value.
- `fuzzcore.command.Command` holds the arguments of a command line, plus an
  optional output file and a flag to combine stderr with stdout.
  - Arguments after `-ignore_remaining_args=1` are fixed. New arguments go in
    before that marker, and lookups and removals ignore everything after it.
  - `str(cmd)` renders the command, including `>file` and `2>&1` when they
    are set.
- `fuzzcore.corpus` provides `hash_unit`, `InputInfo`, `EntropicOptions` and
  `InputCorpus`.
  - `hash_unit` returns the hex SHA-1 of a unit.
  - `InputCorpus` stores the inputs and tracks the smallest input for each
    feature.
  - It keeps the set of rare features for the entropic power schedule.
  - It picks inputs to mutate by weight.
  - If it has an output corpus directory, it can delete an input's file
    there.
- `fuzzcore.dictionary` provides `Word`, `DictionaryEntry` and `Dictionary`.
  - A `Word` holds at most 64 bytes.
  - A `DictionaryEntry` has an optional position hint and counts its uses and
    successes.
  - A `Dictionary` holds at most 16384 entries. Any further entries are
    dropped silently.
- `fuzzcore.dataflow` provides `DataFlowTracer`, `format_binary` and
  `iteration_count`.
  - The tracer records which input bytes each instrumented function's
    comparisons depend on. It handles the input in chunks of 16 bytes.
  - It also records which basic blocks were executed.
  - It renders the results as `F<n> <bits>` and `C<n> <blocks...> <total>`
    lines.
- `fuzzcore.standalone.run_inputs(target, paths, initialize, log)` reads each
  file and passes its bytes to `target`. It writes progress lines to `log`,
  or to stderr by default, and returns the sizes it read.

## Examples

```python
from fuzzcore.command import Command
from fuzzcore.corpus import EntropicOptions, InputCorpus
from fuzzcore.rand import Random

cmd = Command(["./target", "-runs=10"])
cmd.add_flag("max_len", "64")
cmd.combine_out_and_err(True)
print(str(cmd))  # ./target -runs=10 -max_len=64 2>&1

corpus = InputCorpus("", EntropicOptions(True, 100, 0xFF, False))
corpus.add_to_corpus(b"seed", 1, False, False, False, 0, [], {}, None)
info = corpus.choose_unit_to_mutate(Random(0))
print(info.unit)  # b'seed'
```

```python
from fuzzcore.dataflow import DataFlowTracer

tracer = DataFlowTracer([1, 0, 1])  # two functions: blocks 0-1 and block 2
tracer.begin_iteration()
tracer.enter_block(0)
tracer.trace_cmp(0b1, 0)
tracer.enter_block(2)
print(tracer.format_data_flow(4), end="")  # F0 1000
print(tracer.format_coverage(), end="")    # C0 2 / C1 1
```

```python
import sys
from fuzzcore.standalone import run_inputs

def target(data: bytes) -> int:
    assert not data.startswith(b"crash")
    return 0

sizes = run_inputs(target, ["input1", "input2"], None, sys.stderr)
```

## What this package does not do

This package contains no fuzzing loop and no mutation engine. It does not
merge corpora, and it has no command-line program. `Command` only builds and
renders a command line; it does not start a process. `DataFlowTracer` does
not instrument code. The caller reports blocks and comparisons to it.

## Running the tests

```
pip install .[test]
pytest
```