"""
Corpus module - Prompt corpus loading and per-session sampling.
"""

from .loader import FALLBACK_PROMPTS, CorpusLoader, parse_corpus, split_csv_line
from .sampler import build_session

__all__ = [
    "FALLBACK_PROMPTS",
    "CorpusLoader",
    "build_session",
    "parse_corpus",
    "split_csv_line",
]
