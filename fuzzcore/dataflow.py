"""Per-function data-flow labels and basic-block coverage for one input.

Input bytes are traced in chunks of ``NUM_LABELS``: in each iteration every
byte of the current chunk carries its own label bit, and comparisons inside
a function merge the labels of their operands into that function's label.
"""

from __future__ import annotations

NUM_LABELS = 16
PCFLAG_FUNC_ENTRY = 1


def format_binary(label: int, length: int) -> str:
    """Render the low ``length`` bits of ``label``, least significant first."""
    if not 0 <= length <= NUM_LABELS:
        raise ValueError(f"length {length} is outside 0..{NUM_LABELS}")
    return "".join("1" if label >> i & 1 else "0" for i in range(length))


def iteration_count(input_len: int) -> int:
    """Number of tracing iterations needed to cover ``input_len`` bytes."""
    if input_len < 0:
        raise ValueError("input length must not be negative")
    return (input_len + NUM_LABELS - 1) // NUM_LABELS


class DataFlowTracer:
    """Collects data-flow labels and block coverage of instrumented functions.

    ``pc_flags`` holds one flag word per instrumented basic block; blocks with
    ``PCFLAG_FUNC_ENTRY`` set start a new function.
    """

    def __init__(self, pc_flags) -> None:
        self._flags = list(pc_flags)
        self._guards: list[int] = []
        num_funcs = 0
        for flags in self._flags:
            if flags & PCFLAG_FUNC_ENTRY:
                num_funcs += 1
                self._guards.append(num_funcs)
            else:
                self._guards.append(0)
        self.num_funcs = num_funcs
        self.bb_executed = [False] * len(self._flags)
        self._iterations: list[list[int]] = []
        self._current_func = 0

    @property
    def num_guards(self) -> int:
        """Number of instrumented basic blocks."""
        return len(self._flags)

    @property
    def iterations(self) -> list[list[int]]:
        """Function labels recorded in each iteration so far."""
        return [list(labels) for labels in self._iterations]

    def block_is_entry(self, block_idx: int) -> bool:
        """Return whether the block starts a function."""
        return bool(self._flags[block_idx] & PCFLAG_FUNC_ENTRY)

    def begin_iteration(self) -> None:
        """Start a new iteration with all function labels cleared."""
        self._iterations.append([0] * self.num_funcs)

    def _labels(self) -> list[int]:
        if not self._iterations:
            raise RuntimeError("no iteration has been started")
        return self._iterations[-1]

    def enter_block(self, guard_idx: int) -> None:
        """Mark a block executed; entering a function makes it current."""
        self.bb_executed[guard_idx] = True
        guard = self._guards[guard_idx]
        if guard:
            self._current_func = guard - 1

    def trace_cmp(self, label1: int, label2: int) -> None:
        """Merge the labels of both comparison operands into the current function."""
        labels = self._labels()
        labels[self._current_func] |= label1 | label2

    def trace_switch(self, label: int) -> None:
        """Merge the label of a switch operand into the current function."""
        labels = self._labels()
        if self._current_func >= self.num_funcs:
            raise RuntimeError("no instrumented function is current")
        labels[self._current_func] |= label

    def format_data_flow(self, input_len: int) -> str:
        """Return one ``F<n> <bits>`` line per function that depends on the input."""
        count = len(self._iterations)
        if count != iteration_count(input_len):
            raise ValueError(
                f"{count} iteration(s) recorded but {input_len} bytes need "
                f"{iteration_count(input_len)}"
            )
        last_len = input_len % NUM_LABELS or NUM_LABELS
        lines = []
        for func in range(self.num_funcs):
            if not any(labels[func] for labels in self._iterations):
                continue
            bits = "".join(
                format_binary(
                    labels[func], last_len if it == count - 1 else NUM_LABELS
                )
                for it, labels in enumerate(self._iterations)
            )
            lines.append(f"F{func} {bits}\n")
        return "".join(lines)

    def format_coverage(self) -> str:
        """Return one ``C<n> <blocks...> <total>`` line per executed function."""
        lines = []
        func_num = -1
        beg = 0
        total = self.num_guards
        while beg < total:
            func_num += 1
            if not self.block_is_entry(beg):
                raise ValueError(f"block {beg} does not start a function")
            end = beg + 1
            while end < total and not self.block_is_entry(end):
                end += 1
            if self.bb_executed[beg]:
                covered = "".join(
                    f" {i - beg}" for i in range(beg + 1, end) if self.bb_executed[i]
                )
                lines.append(f"C{func_num}{covered} {end - beg}\n")
            beg = end
        return "".join(lines)