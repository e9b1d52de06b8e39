"""
Inclusion Tester

Decides whether a simulated point plausibly belongs to a target hypervolume.
The point's tail statistic is ranked against the statistics of a null sample
drawn from the target itself: the inclusion score is the empirical CDF of
the pooled statistics evaluated at the point's statistic. A low score means
the point is more extreme than nearly every null draw.

Two forms are provided:
- inclusion_score: one point, null statistics evaluated on demand
- score_candidates: many points at once, null statistics evaluated once and
  subsampled independently per candidate
"""

from typing import Optional

import numpy as np
from scipy import stats

from ..core.config import INCLUSION_THRESHOLD
from ..core.descriptor import HypervolumeDescriptor
from ..core.errors import InsufficientSampleError
from ..sampling.sampler import RandomLike, as_generator
from .tail import TailProbability


def ecdf_rank(null_probs: np.ndarray, prob: float) -> float:
    """
    Empirical CDF of ``null_probs`` plus ``prob``, evaluated at ``prob``.
    """
    sample = np.append(np.asarray(null_probs, dtype=np.float64).reshape(-1), prob)
    return float(stats.ecdf(sample).cdf.evaluate(prob))


def inclusion_score(
    point: np.ndarray,
    target: HypervolumeDescriptor,
    null_sample: np.ndarray,
    ndraws: int,
    rng: RandomLike = None,
    tail: Optional[TailProbability] = None
) -> float:
    """
    Score one point against a target hypervolume.

    Parameters
    ----------
    point : np.ndarray
        Candidate point of shape (D,).
    target : HypervolumeDescriptor
        Hypervolume the point is tested against.
    null_sample : np.ndarray
        Points simulated from ``target``, shape (M, D) with M >= ndraws.
    ndraws : int
        Null draws (without replacement) to rank against.
    rng : int or Generator, optional
        Randomness for the subsample and the integration.
    tail : TailProbability, optional
        Precomputed statistic for ``target``; built if omitted.

    Returns
    -------
    float
        Inclusion score in (0, 1].
    """
    null_sample = np.atleast_2d(null_sample)
    if len(null_sample) < ndraws:
        raise InsufficientSampleError(len(null_sample), ndraws)

    gen = as_generator(rng)
    if tail is None:
        tail = TailProbability(target)

    prob = tail(point, gen)[0]
    rsims = null_sample[gen.choice(len(null_sample), ndraws, replace=False)]
    sim_probs = tail(rsims, gen)

    return ecdf_rank(sim_probs, prob)


def draw_null_indices(
    n_null: int,
    n_candidates: int,
    ndraws: int,
    rng: RandomLike = None
) -> np.ndarray:
    """
    Independent without-replacement subsamples, one row per candidate.

    Returns
    -------
    np.ndarray
        Integer array of shape (n_candidates, ndraws).
    """
    if n_null < ndraws:
        raise InsufficientSampleError(n_null, ndraws)

    gen = as_generator(rng)
    if n_candidates == 0:
        return np.empty((0, ndraws), dtype=np.intp)
    return np.stack([gen.choice(n_null, ndraws, replace=False) for _ in range(n_candidates)])


def score_candidates(
    candidate_probs: np.ndarray,
    null_probs: np.ndarray,
    ndraws: int,
    rng: RandomLike = None,
    null_indices: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    Inclusion scores for a batch of candidates.

    Equivalent to calling ``inclusion_score`` for each candidate, with the
    null statistics evaluated once for the whole null sample.

    Parameters
    ----------
    candidate_probs : np.ndarray
        Tail statistics of the candidates, shape (N,).
    null_probs : np.ndarray
        Tail statistics of every null point, shape (M,).
    ndraws : int
        Null draws per candidate.
    rng : int or Generator, optional
        Randomness for the subsamples (ignored when ``null_indices`` given).
    null_indices : np.ndarray, optional
        Precomputed subsample indices of shape (N, ndraws).

    Returns
    -------
    np.ndarray
        Scores of shape (N,).
    """
    candidate_probs = np.asarray(candidate_probs, dtype=np.float64).reshape(-1)
    null_probs = np.asarray(null_probs, dtype=np.float64).reshape(-1)

    if null_indices is None:
        null_indices = draw_null_indices(len(null_probs), len(candidate_probs), ndraws, rng)
    if null_indices.shape != (len(candidate_probs), ndraws):
        raise ValueError(
            f"Expected null indices of shape ({len(candidate_probs)}, {ndraws}), "
            f"got {null_indices.shape}"
        )

    drawn = null_probs[null_indices]
    # The candidate itself is part of the ECDF sample
    n_below = np.sum(drawn <= candidate_probs[:, None], axis=1) + 1
    return n_below / (ndraws + 1)


def count_included(scores: np.ndarray, threshold: float = INCLUSION_THRESHOLD) -> int:
    """Number of scores strictly above the inclusion threshold."""
    return int(np.count_nonzero(np.asarray(scores) > threshold))
