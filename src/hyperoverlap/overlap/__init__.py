"""
Overlap estimation and the end-to-end entry point.
"""

from .aggregator import (
    DEFAULT_CHUNK_SIZE,
    ProgressCallback,
    CancellationToken,
    resolve_n_jobs,
    evaluate_tail,
    count_direction,
    overlap_stats,
    estimate_overlap,
)
from .pipeline import overlap_mbh

__all__ = [
    'DEFAULT_CHUNK_SIZE',
    'ProgressCallback',
    'CancellationToken',
    'resolve_n_jobs',
    'evaluate_tail',
    'count_direction',
    'overlap_stats',
    'estimate_overlap',
    'overlap_mbh',
]
