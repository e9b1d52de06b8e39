"""
Tail probabilities and the per-point inclusion test.
"""

from .tail import TailProbability, tail_probability
from .tester import (
    ecdf_rank,
    inclusion_score,
    draw_null_indices,
    score_candidates,
    count_included,
)

__all__ = [
    'TailProbability',
    'tail_probability',
    'ecdf_rank',
    'inclusion_score',
    'draw_null_indices',
    'score_candidates',
    'count_included',
]
