"""Settings that steer a fuzzing run."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class FuzzingOptions:
    """All tunable settings of a fuzzing session, with their defaults."""

    verbosity: int = 1
    max_len: int = 0
    len_control: int = 1000
    keep_seed: bool = False
    unit_timeout_sec: int = 300
    timeout_exit_code: int = 70
    oom_exit_code: int = 71
    interrupt_exit_code: int = 72
    error_exit_code: int = 77
    ignore_timeouts: bool = True
    ignore_ooms: bool = True
    ignore_crashes: bool = False
    max_total_time_sec: int = 0
    rss_limit_mb: int = 0
    malloc_limit_mb: int = 0
    do_cross_over: bool = True
    cross_over_uniform_dist: bool = False
    mutate_depth: int = 5
    reduce_depth: bool = False
    use_counters: bool = False
    use_memmem: bool = True
    use_cmp: bool = False
    use_value_profile: int = 0
    shrink: bool = False
    reduce_inputs: bool = False
    reload_interval_sec: int = 1
    shuffle_at_start_up: bool = True
    prefer_small: bool = True
    max_number_of_runs: int = (1 << 64) - 1
    report_slow_units: int = 10
    only_ascii: bool = False
    entropic: bool = True
    entropic_feature_frequency_threshold: int = 0xFF
    entropic_number_of_rarest_features: int = 100
    entropic_scale_per_exec_time: bool = False
    output_corpus: str = ""
    artifact_prefix: str = "./"
    exact_artifact_path: str = ""
    exit_on_src_pos: str = ""
    exit_on_item: str = ""
    focus_function: str = ""
    data_flow_trace: str = ""
    collect_data_flow: str = ""
    features_dir: str = ""
    mutation_graph_file: str = ""
    stop_file: str = ""
    save_artifacts: bool = True
    print_new: bool = True
    print_new_cov_pcs: bool = False
    print_new_cov_funcs: int = 0
    print_final_stats: bool = False
    print_corpus_stats: bool = False
    print_coverage: bool = False
    print_full_coverage: bool = False
    dump_coverage: bool = False
    detect_leaks: bool = True
    purge_allocator_interval_sec: int = 1
    trace_malloc: int = 0
    handle_abrt: bool = False
    handle_alrm: bool = False
    handle_bus: bool = False
    handle_fpe: bool = False
    handle_ill: bool = False
    handle_int: bool = False
    handle_segv: bool = False
    handle_term: bool = False
    handle_xfsz: bool = False
    handle_usr1: bool = False
    handle_usr2: bool = False
    handle_win_except: bool = False