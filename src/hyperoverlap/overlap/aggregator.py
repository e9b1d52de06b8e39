"""
Overlap Aggregator

Simulates points from both hypervolumes, tests every point of each against
the other hypervolume, and combines the included counts into one
volume-normalised overlap statistic:

    (n_1_in_2 + n_2_in_1) / (volume1 + volume2)

Each direction runs in two stages. First the tail statistic is evaluated
for all null and candidate points (chunked, optionally over a thread pool).
Then every candidate is scored against its own subsample of the null
statistics. Chunk seeds and subsample indices are fixed up front, so a
given seed yields the same estimate for any number of workers.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Optional
import logging
import os
import threading

import numpy as np

from ..core.config import INCLUSION_THRESHOLD, DEFAULT_NDRAWS
from ..core.descriptor import HypervolumeDescriptor, check_dimensions
from ..core.errors import InsufficientSampleError, OverlapCancelledError
from ..inclusion.tail import TailProbability
from ..inclusion.tester import draw_null_indices, score_candidates, count_included
from ..sampling.sampler import RandomLike, sample_points


logger = logging.getLogger(__name__)

# Points per tail-probability task
DEFAULT_CHUNK_SIZE = 64

# progress(direction, completed, total)
ProgressCallback = Callable[[str, int, int], None]


class CancellationToken:
    """
    Thread-safe flag for aborting a running estimation.

    The estimator checks the token before every chunk of work and raises
    ``OverlapCancelledError`` once it is set.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OverlapCancelledError("Overlap estimation was cancelled")


def _seed_sequence(seed: RandomLike) -> np.random.SeedSequence:
    if isinstance(seed, np.random.SeedSequence):
        return seed
    if isinstance(seed, np.random.Generator):
        return np.random.SeedSequence(int(seed.integers(2**63)))
    return np.random.SeedSequence(seed)


def resolve_n_jobs(n_jobs: int) -> int:
    """Translate ``-1`` to the number of available cores."""
    if n_jobs == -1:
        return os.cpu_count() or 1
    if n_jobs < 1:
        raise ValueError(f"n_jobs must be positive or -1, got {n_jobs}")
    return n_jobs


def evaluate_tail(
    tail: TailProbability,
    points: np.ndarray,
    seed: RandomLike = None,
    n_jobs: int = 1,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    label: str = '',
    progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
    offset: int = 0,
    total: Optional[int] = None
) -> np.ndarray:
    """
    Evaluate a tail statistic over many points in chunks.

    Parameters
    ----------
    tail : TailProbability
        Statistic of the target hypervolume.
    points : np.ndarray
        Points of shape (N, D).
    seed : int, SeedSequence or Generator, optional
        Root seed; every chunk integrates with its own spawned child.
    n_jobs : int
        Worker threads. 1 runs inline, -1 uses all cores.
    chunk_size : int
        Points per task.
    label : str
        Direction label passed to ``progress``.
    progress : callable, optional
        Called as ``progress(label, completed, total)`` after each chunk.
    cancel_token : CancellationToken, optional
        Checked before each chunk.
    offset, total : int
        Progress already completed and overall total for ``label``.

    Returns
    -------
    np.ndarray
        Statistic of shape (N,), in input order.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    n_points = len(points)
    total = n_points if total is None else total
    starts = list(range(0, n_points, chunk_size))
    child_seeds = _seed_sequence(seed).spawn(len(starts))
    result = np.empty(n_points, dtype=np.float64)

    def run(i: int) -> np.ndarray:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        chunk = points[starts[i]:starts[i] + chunk_size]
        return tail(chunk, np.random.default_rng(child_seeds[i]))

    def store(i: int, probs: np.ndarray, done: int) -> int:
        result[starts[i]:starts[i] + len(probs)] = probs
        done += len(probs)
        logger.debug("%s: %d/%d tail probabilities", label, offset + done, total)
        if progress is not None:
            progress(label, offset + done, total)
        return done

    workers = min(resolve_n_jobs(n_jobs), max(len(starts), 1))
    done = 0

    if workers == 1:
        for i in range(len(starts)):
            done = store(i, run(i), done)
        return result

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {pool.submit(run, i): i for i in range(len(starts))}
        try:
            for future in as_completed(futures):
                done = store(futures[future], future.result(), done)
        except BaseException:
            for future in futures:
                future.cancel()
            raise

    return result


def count_direction(
    candidates: np.ndarray,
    null_sample: np.ndarray,
    target: HypervolumeDescriptor,
    ndraws: int,
    threshold: float = INCLUSION_THRESHOLD,
    seed: RandomLike = None,
    n_jobs: int = 1,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    label: str = '',
    progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
    **tail_options
) -> int:
    """
    Count candidates included in ``target``.

    ``null_sample`` must be simulated from ``target`` and hold at least
    ``ndraws`` points.
    """
    if len(null_sample) < ndraws:
        raise InsufficientSampleError(len(null_sample), ndraws)

    tail = TailProbability(target, **tail_options)
    null_seed, cand_seed, index_seed = _seed_sequence(seed).spawn(3)
    total = len(null_sample) + len(candidates)
    shared = dict(
        n_jobs=n_jobs,
        chunk_size=chunk_size,
        label=label,
        progress=progress,
        cancel_token=cancel_token,
        total=total,
    )

    null_probs = evaluate_tail(tail, null_sample, null_seed, **shared)
    cand_probs = evaluate_tail(tail, candidates, cand_seed, offset=len(null_sample), **shared)

    null_indices = draw_null_indices(
        len(null_probs), len(cand_probs), ndraws, np.random.default_rng(index_seed)
    )
    scores = score_candidates(cand_probs, null_probs, ndraws, null_indices=null_indices)
    return count_included(scores, threshold)


def overlap_stats(
    descriptor1: HypervolumeDescriptor,
    descriptor2: HypervolumeDescriptor,
    proppoints: float = 1.0,
    ndraws: int = DEFAULT_NDRAWS,
    *,
    threshold: float = INCLUSION_THRESHOLD,
    seed: RandomLike = None,
    n_jobs: int = 1,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
    **tail_options
) -> dict:
    """
    Run the overlap estimation and report its intermediate counts.

    Parameters
    ----------
    descriptor1, descriptor2 : HypervolumeDescriptor
        Hypervolumes to compare. Dimension names must match.
    proppoints : float
        Points simulated per unit volume. Default 1.
    ndraws : int
        Null draws per inclusion test. Default 99.
    threshold : float
        Score above which a point counts as included. Default 0.05.
    seed : int, SeedSequence or Generator, optional
        Root of all randomness in the run.
    n_jobs : int
        Worker threads for tail-probability evaluation.
    chunk_size : int
        Points per worker task.
    progress : callable, optional
        ``progress(direction, completed, total)``.
    cancel_token : CancellationToken, optional
        Set it to abort the run.
    **tail_options
        ``maxpts``, ``abseps``, ``releps`` for the orthant integrals.

    Returns
    -------
    dict
        Statistics including:
        - overlap: The overlap estimate
        - n_points1, n_points2: Points simulated from each hypervolume
        - n_1_in_2: Points of hypervolume 1 included in hypervolume 2
        - n_2_in_1: Points of hypervolume 2 included in hypervolume 1
        - volume1, volume2: Hypervolume volumes
    """
    check_dimensions(descriptor1, descriptor2)

    if int(ndraws) != ndraws or ndraws < 1:
        raise ValueError(f"ndraws must be a positive integer, got {ndraws}")
    ndraws = int(ndraws)

    logger.info("Start overlap calculation - this may take some time")

    sample1_seed, sample2_seed, seed_12, seed_21 = _seed_sequence(seed).spawn(4)
    pnts_hv1 = sample_points(descriptor1, proppoints, np.random.default_rng(sample1_seed))
    pnts_hv2 = sample_points(descriptor2, proppoints, np.random.default_rng(sample2_seed))

    for pnts in (pnts_hv1, pnts_hv2):
        if len(pnts) < ndraws:
            raise InsufficientSampleError(len(pnts), ndraws)

    options = dict(
        threshold=threshold,
        n_jobs=n_jobs,
        chunk_size=chunk_size,
        progress=progress,
        cancel_token=cancel_token,
        **tail_options
    )

    logger.info("Test points from hypervolume 1 in hypervolume 2")
    n_1_in_2 = count_direction(
        pnts_hv1, pnts_hv2, descriptor2, ndraws, seed=seed_12, label='hv1 in hv2', **options
    )

    logger.info("Test points from hypervolume 2 in hypervolume 1")
    n_2_in_1 = count_direction(
        pnts_hv2, pnts_hv1, descriptor1, ndraws, seed=seed_21, label='hv2 in hv1', **options
    )

    overlap = (n_1_in_2 + n_2_in_1) / (descriptor1.volume + descriptor2.volume)
    logger.info("Overlap estimate: %.4f", overlap)

    return {
        'overlap': float(overlap),
        'n_points1': len(pnts_hv1),
        'n_points2': len(pnts_hv2),
        'n_1_in_2': n_1_in_2,
        'n_2_in_1': n_2_in_1,
        'volume1': descriptor1.volume,
        'volume2': descriptor2.volume,
    }


def estimate_overlap(
    descriptor1: HypervolumeDescriptor,
    descriptor2: HypervolumeDescriptor,
    proppoints: float = 1.0,
    ndraws: int = DEFAULT_NDRAWS,
    **options
) -> float:
    """
    Estimate the overlap of two hypervolumes.

    Accepts the same keyword options as ``overlap_stats``.

    Returns
    -------
    float
        Non-negative overlap estimate. Not a normalized probability: two
        identical hypervolumes give a value close to, not exactly, one.
    """
    return overlap_stats(descriptor1, descriptor2, proppoints, ndraws, **options)['overlap']
