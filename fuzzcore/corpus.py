"""The corpus of interesting inputs and the schedule for picking what to mutate."""

from __future__ import annotations

import bisect
import hashlib
import math
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from fuzzcore.rand import Random

_FEATURE_SET_SIZE = 1 << 21
_MAX_MUTATION_FACTOR = 20
_SPARSE_ENERGY_UPDATES = 100
_MAX_FEATURE_FREQ = 0xFFFF
# Span of the raw values produced by the minimal standard generator.
_RAND_RANGE = 2147483646


def hash_unit(unit: bytes) -> str:
    """Return the SHA-1 of ``unit`` as a lower-case hex string."""
    return hashlib.sha1(bytes(unit)).hexdigest()


@dataclass
class InputInfo:
    """One corpus element together with its statistics and energy."""

    unit: bytes = b""
    time_of_unit: int = 0  # Execution time in microseconds.
    sha1: bytes = b""
    num_features: int = 0
    tmp: int = 0
    num_executed_mutations: int = 0
    num_successful_mutations: int = 0
    never_reduce: bool = False
    may_delete_file: bool = False
    reduced: bool = False
    has_focus_function: bool = False
    uniq_feature_set: list[int] = field(default_factory=list)
    data_flow_trace_for_focus_function: bytes = b""
    needs_energy_update: bool = False
    energy: float = 0.0
    sum_incidence: float = 0.0
    feature_freqs: list[tuple[int, int]] = field(default_factory=list)

    @property
    def sha1_hex(self) -> str:
        """The checksum as a hex string."""
        return self.sha1.hex()

    def _lower_bound(self, idx: int) -> int:
        return bisect.bisect_left(self.feature_freqs, (idx, 0))

    def delete_feature_freq(self, idx: int) -> bool:
        """Forget the local frequency of feature ``idx``; return True if it was known."""
        pos = self._lower_bound(idx)
        if pos < len(self.feature_freqs) and self.feature_freqs[pos][0] == idx:
            del self.feature_freqs[pos]
            return True
        return False

    def update_energy(
        self,
        global_number_of_features: int,
        scale_per_exec_time: bool,
        average_unit_execution_time: int,
    ) -> None:
        """Recompute the entropy-based energy of this input."""
        energy = 0.0
        sum_incidence = 0.0

        # Add-one smoothing for locally discovered features.
        for _, freq in self.feature_freqs:
            local = float(freq + 1)
            energy -= local * math.log(local)
            sum_incidence += local

        # Locally undiscovered features contribute nothing to the energy.
        sum_incidence += float(global_number_of_features - len(self.feature_freqs))

        # One locally abundant feature, with add-one smoothing.
        abundant = float(self.num_executed_mutations + 1)
        energy -= abundant * math.log(abundant)
        sum_incidence += abundant

        if sum_incidence != 0:
            energy = energy / sum_incidence + math.log(sum_incidence)

        if scale_per_exec_time:
            t = self.time_of_unit
            avg = average_unit_execution_time
            if t > avg * 10:
                score = 10
            elif t > avg * 4:
                score = 25
            elif t > avg * 2:
                score = 50
            elif t * 3 > avg * 4:
                score = 75
            elif t * 4 < avg:
                score = 300
            elif t * 3 < avg:
                score = 200
            elif t * 2 < avg:
                score = 150
            else:
                score = 100
            energy *= score

        self.energy = energy
        self.sum_incidence = sum_incidence

    def update_feature_frequency(self, idx: int) -> None:
        """Increment the local frequency of feature ``idx``, keeping the list sorted."""
        self.needs_energy_update = True
        pos = self._lower_bound(idx)
        if pos < len(self.feature_freqs) and self.feature_freqs[pos][0] == idx:
            freq = self.feature_freqs[pos][1]
            self.feature_freqs[pos] = (idx, (freq + 1) & _MAX_FEATURE_FREQ)
        else:
            self.feature_freqs.insert(pos, (idx, 1))


@dataclass
class EntropicOptions:
    """Settings of the entropy-based power schedule."""

    enabled: bool = True
    number_of_rarest_features: int = 100
    feature_frequency_threshold: int = 0xFF
    scale_per_exec_time: bool = False


class InputCorpus:
    """The set of inputs kept for fuzzing, with feature bookkeeping."""

    FEATURE_SET_SIZE = _FEATURE_SET_SIZE

    def __init__(self, output_corpus: str, entropic: EntropicOptions) -> None:
        self.output_corpus = output_corpus
        self.entropic = entropic
        self._inputs: list[InputInfo] = []
        self._hashes: set[str] = set()
        self._num_executed_mutations = 0
        self._num_added_features = 0
        self._num_updated_features = 0
        self._input_sizes_per_feature: dict[int, int] = {}
        self._smallest_element_per_feature: dict[int, int] = {}
        self._global_feature_freqs: dict[int, int] = {}
        self._rare_features: list[int] = []
        self._freq_of_most_abundant_rare_feature = 0
        self._distribution_needs_update = True
        self._cumulative: list[float] = []

    def __len__(self) -> int:
        return len(self._inputs)

    def __getitem__(self, idx: int) -> bytes:
        return self._inputs[idx].unit

    @property
    def inputs(self) -> list[InputInfo]:
        """The corpus elements in insertion order."""
        return list(self._inputs)

    @property
    def rare_features(self) -> list[int]:
        """Indices of the features currently considered rare."""
        return list(self._rare_features)

    def size_in_bytes(self) -> int:
        """Total size of all units."""
        return sum(len(info.unit) for info in self._inputs)

    def num_active_units(self) -> int:
        """Number of units that have not been deleted."""
        return sum(1 for info in self._inputs if info.unit)

    def max_input_size(self) -> int:
        """Size of the largest unit."""
        return max((len(info.unit) for info in self._inputs), default=0)

    def increment_num_executed_mutations(self) -> None:
        """Count one more executed mutation across the corpus."""
        self._num_executed_mutations += 1

    def num_inputs_that_touch_focus_function(self) -> int:
        """Number of inputs that reach the focus function."""
        return sum(1 for info in self._inputs if info.has_focus_function)

    def num_inputs_with_data_flow_trace(self) -> int:
        """Number of inputs that carry a data-flow trace."""
        return sum(1 for info in self._inputs if info.data_flow_trace_for_focus_function)

    def add_to_corpus(
        self,
        unit: bytes,
        num_features: int,
        may_delete_file: bool,
        has_focus_function: bool,
        never_reduce: bool,
        time_of_unit: int,
        feature_set: Iterable[int],
        data_flow_traces: Mapping[str, bytes] | None,
        base_info: InputInfo | None,
    ) -> InputInfo:
        """Add a new non-empty unit and return its record."""
        unit = bytes(unit)
        if not unit:
            raise ValueError("cannot add an empty unit to the corpus")
        if len(self._inputs) >= 0xFFFFFFFF:
            raise OverflowError("corpus is full")
        rare = len(self._rare_features)
        info = InputInfo(
            unit=unit,
            num_features=num_features,
            never_reduce=never_reduce,
            time_of_unit=time_of_unit,
            may_delete_file=may_delete_file,
            uniq_feature_set=sorted(feature_set),
            has_focus_function=has_focus_function,
            energy=math.log(rare) if rare else 1.0,
            sum_incidence=float(rare),
            needs_energy_update=False,
            sha1=hashlib.sha1(unit).digest(),
        )
        self._inputs.append(info)
        sha1 = info.sha1_hex
        self._hashes.add(sha1)
        if has_focus_function and data_flow_traces:
            trace = data_flow_traces.get(sha1)
            if trace:
                info.data_flow_trace_for_focus_function = bytes(trace)
        # Without a trace of its own, borrow the one of the base input.
        if not info.data_flow_trace_for_focus_function and base_info is not None:
            info.data_flow_trace_for_focus_function = (
                base_info.data_flow_trace_for_focus_function
            )
        self._distribution_needs_update = True
        return info

    def replace(self, info: InputInfo, unit: bytes) -> None:
        """Replace the unit of ``info`` with a strictly smaller one."""
        unit = bytes(unit)
        if len(info.unit) <= len(unit):
            raise ValueError("replacement unit must be smaller than the original")
        self._hashes.discard(info.sha1_hex)
        self.delete_file(info)
        info.sha1 = hashlib.sha1(unit).digest()
        self._hashes.add(info.sha1_hex)
        info.unit = unit
        info.reduced = True
        self._distribution_needs_update = True

    def has_unit(self, unit_or_hash: bytes | str) -> bool:
        """Return whether a unit, or a unit with the given hex hash, is present."""
        if isinstance(unit_or_hash, str):
            return unit_or_hash in self._hashes
        return hash_unit(unit_or_hash) in self._hashes

    def choose_unit_to_mutate(self, rand: Random) -> InputInfo:
        """Pick an input according to the current weights."""
        return self._inputs[self.choose_unit_idx_to_mutate(rand)]

    def choose_unit_to_cross_over_with(self, rand: Random, uniform_dist: bool) -> InputInfo:
        """Pick a partner for cross-over, uniformly or by weight."""
        if not uniform_dist:
            return self.choose_unit_to_mutate(rand)
        return self._inputs[rand.below(len(self._inputs))]

    def choose_unit_idx_to_mutate(self, rand: Random) -> int:
        """Return the index of an input chosen according to the current weights."""
        self._update_corpus_distribution(rand)
        r1 = rand.raw() - 1
        r2 = rand.raw() - 1
        p = (r1 + r2 * _RAND_RANGE) / (_RAND_RANGE * _RAND_RANGE)
        if p >= 1.0:
            p = math.nextafter(1.0, 0.0)
        idx = bisect.bisect_right(self._cumulative, p)
        return min(idx, len(self._inputs) - 1)

    def format_stats(self) -> str:
        """Return one line of statistics per input."""
        return "".join(
            f"  [{i: 3d} {info.sha1_hex}] sz: {len(info.unit): 5d} "
            f"runs: {info.num_executed_mutations: 5d} "
            f"succ: {info.num_successful_mutations: 5d} "
            f"focus: {int(info.has_focus_function)}\n"
            for i, info in enumerate(self._inputs)
        )

    def delete_file(self, info: InputInfo) -> None:
        """Remove the file of ``info`` from the output corpus if allowed."""
        if self.output_corpus and info.may_delete_file:
            Path(os.path.join(self.output_corpus, info.sha1_hex)).unlink(missing_ok=True)

    def delete_input(self, idx: int) -> None:
        """Evict the input at ``idx``, leaving an empty record in its place."""
        info = self._inputs[idx]
        self.delete_file(info)
        info.unit = b""
        info.energy = 0.0
        info.needs_energy_update = False
        self._distribution_needs_update = True

    def add_rare_feature(self, idx: int) -> None:
        """Register feature ``idx`` as rare, evicting abundant rare features."""
        opts = self.entropic
        freqs = self._global_feature_freqs
        while (
            len(self._rare_features) > opts.number_of_rarest_features
            and self._freq_of_most_abundant_rare_feature > opts.feature_frequency_threshold
        ):
            most = [self._rare_features[0], self._rare_features[0]]
            delete = 0
            for i, candidate in enumerate(self._rare_features):
                if freqs.get(candidate, 0) >= freqs.get(most[0], 0):
                    most[1] = most[0]
                    most[0] = candidate
                    delete = i

            self._rare_features[delete] = self._rare_features[-1]
            self._rare_features.pop()

            for info in self._inputs:
                if info.delete_feature_freq(most[0]):
                    info.needs_energy_update = True

            self._freq_of_most_abundant_rare_feature = freqs.get(most[1], 0)

        self._rare_features.append(idx)
        freqs[idx] = 0
        for info in self._inputs:
            info.delete_feature_freq(idx)
            # Zero-energy seeds are never fuzzed and stay at zero.
            if info.energy > 0.0:
                info.sum_incidence += 1
                info.energy += math.log(info.sum_incidence) / info.sum_incidence

        self._distribution_needs_update = True

    def add_feature(self, idx: int, new_size: int, shrink: bool) -> bool:
        """Record that the next added input has feature ``idx`` at ``new_size``.

        Returns True if the feature is new, or if ``shrink`` is set and the
        new size beats the smallest input seen so far for it.
        """
        if not new_size:
            raise ValueError("feature size must be non-zero")
        idx %= _FEATURE_SET_SIZE
        old_size = self._input_sizes_per_feature.get(idx, 0)
        if old_size and not (shrink and old_size > new_size):
            return False
        if old_size:
            old_idx = self._smallest_element_per_feature[idx]
            info = self._inputs[old_idx]
            if info.num_features <= 0:
                raise RuntimeError("feature bookkeeping is inconsistent")
            info.num_features -= 1
            if info.num_features == 0:
                self.delete_input(old_idx)
        else:
            self._num_added_features += 1
            if self.entropic.enabled:
                self.add_rare_feature(idx)
        self._num_updated_features += 1
        self._smallest_element_per_feature[idx] = len(self._inputs)
        self._input_sizes_per_feature[idx] = new_size
        return True

    def update_feature_frequency(self, info: InputInfo | None, idx: int) -> None:
        """Increment the frequency of feature ``idx`` globally and for ``info``."""
        idx32 = idx % _FEATURE_SET_SIZE
        freq = self._global_feature_freqs.get(idx32, 0)
        if freq == _MAX_FEATURE_FREQ:
            return
        self._global_feature_freqs[idx32] = freq + 1

        if (
            freq > self._freq_of_most_abundant_rare_feature
            or idx32 not in self._rare_features
        ):
            return

        if freq == self._freq_of_most_abundant_rare_feature:
            self._freq_of_most_abundant_rare_feature += 1

        if info is not None:
            info.update_feature_frequency(idx32)

    def num_features(self) -> int:
        """Number of distinct features seen."""
        return self._num_added_features

    def num_feature_updates(self) -> int:
        """Number of times a feature was added or improved."""
        return self._num_updated_features

    def _update_corpus_distribution(self, rand: Random) -> None:
        if not self._distribution_needs_update and (
            not self.entropic.enabled or rand.below(_SPARSE_ENERGY_UPDATES)
        ):
            return
        self._distribution_needs_update = False

        n = len(self._inputs)
        if not n:
            raise IndexError("cannot choose from an empty corpus")
        average_time = sum(info.time_of_unit for info in self._inputs) // n

        weights = [0.0] * n
        vanilla = True
        if self.entropic.enabled:
            for info in self._inputs:
                if info.needs_energy_update and info.energy != 0.0:
                    info.needs_energy_update = False
                    info.update_energy(
                        len(self._rare_features),
                        self.entropic.scale_per_exec_time,
                        average_time,
                    )
            mean_mutations = self._num_executed_mutations // n
            for i, info in enumerate(self._inputs):
                if info.num_features == 0:
                    weights[i] = 0.0
                elif info.num_executed_mutations // _MAX_MUTATION_FACTOR > mean_mutations:
                    weights[i] = 0.0
                else:
                    weights[i] = info.energy
                if weights[i] > 0.0:
                    vanilla = False

        if vanilla:
            weights = [
                float((i + 1) * (1000 if info.has_focus_function else 1))
                if info.num_features
                else 0.0
                for i, info in enumerate(self._inputs)
            ]

        total = sum(weights)
        if total <= 0.0:
            weights = [1.0] * n
            total = float(n)
        running = 0.0
        cumulative = []
        for w in weights:
            running += w
            cumulative.append(running / total)
        cumulative[-1] = 1.0
        self._cumulative = cumulative