import math
from collections import Counter

import pytest

from fuzzcore.corpus import EntropicOptions, InputCorpus, InputInfo, hash_unit
from fuzzcore.rand import Random


def _add(corpus, unit, num_features=1, **kwargs):
    params = dict(
        may_delete_file=False,
        has_focus_function=False,
        never_reduce=False,
        time_of_unit=0,
        feature_set=[],
        data_flow_traces=None,
        base_info=None,
    )
    params.update(kwargs)
    return corpus.add_to_corpus(unit, num_features, **params)


def _plain_options(enabled=False):
    return EntropicOptions(
        enabled=enabled,
        number_of_rarest_features=0xFF,
        feature_frequency_threshold=100,
        scale_per_exec_time=False,
    )


def test_hash_values():
    assert hash_unit(b"abc") == "a9993e364706816aba3e25717850c26c9cd0d89d"
    assert hash_unit(b"abcd") == "81fe8bfe87576c3ecb22426f8e57847382917acf"


def test_distribution_reaches_every_unit():
    rand = Random(0)
    corpus = InputCorpus("", _plain_options())
    n = 10
    tries_per_unit = 1 << 12
    for i in range(n):
        _add(corpus, bytes([i]))
    picks = [corpus.choose_unit_idx_to_mutate(rand) for _ in range(n * tries_per_unit)]
    counts = Counter(picks)
    assert set(counts) == set(range(n))
    assert min(counts.values()) > tries_per_unit // n // 3


def test_zero_feature_inputs_are_never_chosen():
    rand = Random(7)
    corpus = InputCorpus("", _plain_options())
    _add(corpus, b"a", num_features=0)
    _add(corpus, b"b", num_features=1)
    picks = {corpus.choose_unit_idx_to_mutate(rand) for _ in range(200)}
    assert picks == {1}
    assert corpus.choose_unit_to_mutate(rand).unit == b"b"


def test_cross_over_uniform_stays_in_range():
    rand = Random(3)
    corpus = InputCorpus("", _plain_options())
    for i in range(4):
        _add(corpus, bytes([i + 1]))
    seen = {corpus.choose_unit_to_cross_over_with(rand, True).unit for _ in range(200)}
    assert seen == {b"\x01", b"\x02", b"\x03", b"\x04"}


def test_entropic_update_frequency():
    corpus = InputCorpus("", EntropicOptions(True, 0xFF, 100, False))
    info = InputInfo()

    corpus.add_rare_feature(0)
    corpus.update_feature_frequency(info, 0)
    assert len(info.feature_freqs) == 1
    corpus.add_rare_feature(42)
    corpus.update_feature_frequency(info, 0)
    corpus.update_feature_frequency(info, 42)
    assert len(info.feature_freqs) == 2
    assert info.feature_freqs[0][1] == 2
    assert info.feature_freqs[1][1] == 1

    corpus.add_rare_feature(12)
    corpus.add_rare_feature(26)
    corpus.update_feature_frequency(info, 12)
    corpus.update_feature_frequency(info, 12)
    corpus.update_feature_frequency(info, 12)
    corpus.update_feature_frequency(info, 26)

    keys = [k for k, _ in info.feature_freqs]
    assert all(a < b for a, b in zip(keys, keys[1:]))

    assert info.delete_feature_freq(12) is True
    keys = [k for k, _ in info.feature_freqs]
    assert all(a < b for a, b in zip(keys, keys[1:]))
    assert 12 not in keys
    assert info.delete_feature_freq(12) is False


def test_compute_energy():
    info = InputInfo()
    info.feature_freqs = [(1, 3), (2, 3), (3, 3)]
    info.num_executed_mutations = 0
    info.update_energy(4, False, 0)
    assert (info.energy - 1.450805) ** 2 < 0.01

    info.num_executed_mutations = 9
    info.update_energy(5, False, 0)
    assert (info.energy - 1.525496) ** 2 < 0.01

    info.feature_freqs[0] = (1, info.feature_freqs[0][1] + 1)
    info.feature_freqs.append((42, 6))
    info.num_executed_mutations = 20
    info.update_energy(10, False, 0)
    assert (info.energy - 1.792831) ** 2 < 0.01


def test_energy_scales_down_slow_inputs():
    plain = InputInfo(feature_freqs=[(1, 3)], time_of_unit=100)
    scaled = InputInfo(feature_freqs=[(1, 3)], time_of_unit=100)
    plain.update_energy(4, False, 5)
    scaled.update_energy(4, True, 5)
    assert scaled.energy == pytest.approx(plain.energy * 10)


def test_add_to_corpus_records_input():
    corpus = InputCorpus("", _plain_options())
    info = _add(corpus, b"hello", num_features=3, feature_set=[5, 1, 3])
    assert len(corpus) == 1
    assert corpus[0] == b"hello"
    assert info.uniq_feature_set == [1, 3, 5]
    assert info.energy == 1.0
    assert corpus.has_unit(b"hello")
    assert corpus.has_unit(hash_unit(b"hello"))
    assert not corpus.has_unit(b"other")
    assert corpus.size_in_bytes() == 5
    assert corpus.max_input_size() == 5


def test_add_empty_unit_raises():
    corpus = InputCorpus("", _plain_options())
    with pytest.raises(ValueError):
        corpus.add_to_corpus(b"", 1, False, False, False, 0, [], None, None)
    assert len(corpus) == 0
    assert not corpus.has_unit(b"")


def test_data_flow_trace_and_base_fallback():
    corpus = InputCorpus("", _plain_options())
    traces = {hash_unit(b"x"): b"\x01\x02"}
    first = _add(corpus, b"x", has_focus_function=True, data_flow_traces=traces)
    assert first.data_flow_trace_for_focus_function == b"\x01\x02"
    second = _add(corpus, b"y", data_flow_traces=traces, base_info=first)
    assert second.data_flow_trace_for_focus_function == b"\x01\x02"
    assert corpus.num_inputs_with_data_flow_trace() == 2
    assert corpus.num_inputs_that_touch_focus_function() == 1


def test_replace_shrinks_unit():
    corpus = InputCorpus("", _plain_options())
    info = _add(corpus, b"long unit")
    corpus.replace(info, b"short")
    assert corpus[0] == b"short"
    assert info.reduced
    assert corpus.has_unit(b"short")
    assert not corpus.has_unit(b"long unit")
    with pytest.raises(ValueError):
        corpus.replace(info, b"much longer unit")


def test_add_feature_and_shrink_evicts():
    corpus = InputCorpus("", _plain_options())
    assert corpus.add_feature(5, 10, False) is True
    _add(corpus, b"0123456789", num_features=1)
    assert corpus.add_feature(5 + InputCorpus.FEATURE_SET_SIZE, 10, False) is False
    assert corpus.num_features() == 1
    assert corpus.num_feature_updates() == 1

    assert corpus.add_feature(5, 4, True) is True
    assert corpus.num_features() == 1
    assert corpus.num_feature_updates() == 2
    assert corpus[0] == b""
    assert corpus.num_active_units() == 0


def test_add_feature_zero_size_raises():
    corpus = InputCorpus("", _plain_options())
    with pytest.raises(ValueError):
        corpus.add_feature(1, 0, False)


def test_delete_input_removes_file(tmp_path):
    corpus = InputCorpus(str(tmp_path), _plain_options())
    info = _add(corpus, b"data", may_delete_file=True)
    path = tmp_path / hash_unit(b"data")
    path.write_bytes(b"data")
    corpus.delete_input(0)
    assert not path.exists()
    assert info.unit == b""
    assert info.energy == 0.0


def test_format_stats():
    corpus = InputCorpus("", _plain_options())
    _add(corpus, b"ab")
    expected = (
        f"  [  0 {hash_unit(b'ab')}] sz:     2 runs:     0 succ:     0 focus: 0\n"
    )
    assert corpus.format_stats() == expected


def test_rare_feature_eviction():
    opts = EntropicOptions(
        enabled=True,
        number_of_rarest_features=1,
        feature_frequency_threshold=0,
        scale_per_exec_time=False,
    )
    corpus = InputCorpus("", opts)
    corpus.add_rare_feature(1)
    corpus.add_rare_feature(2)
    info = _add(corpus, b"z")
    assert info.energy == pytest.approx(math.log(2))
    corpus.update_feature_frequency(info, 1)
    assert info.feature_freqs == [(1, 1)]

    corpus.add_rare_feature(3)
    assert sorted(corpus.rare_features) == [2, 3]
    assert info.feature_freqs == []
    assert info.needs_energy_update

    corpus.update_feature_frequency(info, 1)
    assert info.feature_freqs == []


def test_increment_mutations_affects_entropic_weights():
    corpus = InputCorpus("", _plain_options(enabled=True))
    rand = Random(1)
    _add(corpus, b"a")
    corpus.increment_num_executed_mutations()
    assert corpus.choose_unit_idx_to_mutate(rand) == 0