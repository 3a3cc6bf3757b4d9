"""Building blocks of a coverage-guided fuzzer: random source, bit helpers,
value bit map, options, command lines, corpus, dictionary, data-flow reports
and a standalone input runner."""

__version__ = "0.4.1"

__all__ = [
    "bitmap",
    "builtins",
    "command",
    "corpus",
    "dataflow",
    "dictionary",
    "options",
    "rand",
    "standalone",
]