"""Fill engine for 5x5 mini crosswords.

This package exposes the public API surface via:

- ``minifill.engine.generator.FillEngine``: generate, fill and candidate operations.
- ``minifill.data.dictionary.WordIndex``: scored dictionary with pattern search.
- ``minifill.engine.grid.FillGrid``: grid loading, slot detection and placement.
"""

from .data.dictionary import DictionaryConfig, WordIndex, get_word_index
from .engine.generator import CandidateResult, FillEngine, FillOptions, FillResult
from .engine.grid import FillGrid

__all__ = [
    "CandidateResult",
    "DictionaryConfig",
    "FillEngine",
    "FillGrid",
    "FillOptions",
    "FillResult",
    "WordIndex",
    "get_word_index",
]

__version__ = "0.1.0"
