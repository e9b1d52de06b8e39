"""
Orthant tail probabilities under a hypervolume's Gaussian.

The extremeness of a point x under N(mu, Sigma) is measured as

    min(P(X >= x), 2 * P(X <= x))

where both probabilities are orthant probabilities (every coordinate
simultaneously above, resp. below, x). The upper orthant is evaluated as the
lower orthant of the reflected distribution N(-mu, Sigma) at -x, so both
tails go through the same CDF integration.
"""

from typing import Optional

import numpy as np
from scipy.stats import multivariate_normal

from ..core.descriptor import HypervolumeDescriptor
from ..core.errors import TailProbabilityError
from ..sampling.sampler import RandomLike, as_generator


# Absolute slack tolerated outside [0, 1] before an integral is rejected
PROB_SLACK = 1e-6

# Integration points per dimension for each orthant probability
DEFAULT_MAXPTS_PER_DIM = 25000


class TailProbability:
    """
    Tail-probability statistic of a target hypervolume.

    Parameters
    ----------
    descriptor : HypervolumeDescriptor
        Target hypervolume.
    maxpts : int, optional
        Maximum integration points. Defaults to 25000 * D; the QMC
        integration spends this whole budget on every call.
    abseps, releps : float
        Absolute and relative integration tolerances.
    """

    def __init__(
        self,
        descriptor: HypervolumeDescriptor,
        maxpts: Optional[int] = None,
        abseps: float = 1e-5,
        releps: float = 1e-5
    ):
        self.descriptor = descriptor
        self.maxpts = int(maxpts) if maxpts else DEFAULT_MAXPTS_PER_DIM * descriptor.ndim
        self.abseps = abseps
        self.releps = releps

    def _frozen(self, mean: np.ndarray, rng: np.random.Generator):
        try:
            return multivariate_normal(
                mean,
                self.descriptor.covariance,
                allow_singular=True,
                seed=rng,
                maxpts=self.maxpts,
                abseps=self.abseps,
                releps=self.releps,
            )
        except ValueError as err:
            raise TailProbabilityError(
                f"Cannot integrate under the target covariance: {err}"
            ) from err

    def _orthant(self, mean: np.ndarray, points: np.ndarray, rng: np.random.Generator) -> np.ndarray:
        probs = np.atleast_1d(np.asarray(self._frozen(mean, rng).cdf(points), dtype=np.float64))
        probs = probs.reshape(-1)

        if probs.shape[0] != points.shape[0]:
            raise TailProbabilityError(
                f"Expected {points.shape[0]} probabilities, integration returned {probs.shape[0]}"
            )
        bad = ~np.isfinite(probs) | (probs < -PROB_SLACK) | (probs > 1 + PROB_SLACK)
        if np.any(bad):
            first = int(np.argmax(bad))
            raise TailProbabilityError(
                f"Orthant probability integration failed at point {points[first].tolist()}: "
                f"got {probs[first]}"
            )
        return np.clip(probs, 0.0, 1.0)

    def lower(self, points: np.ndarray, rng: RandomLike = None) -> np.ndarray:
        """P(X <= x) in every coordinate, for each row x of ``points``."""
        points = self._check_points(points)
        return self._orthant(self.descriptor.mean, points, as_generator(rng))

    def upper(self, points: np.ndarray, rng: RandomLike = None) -> np.ndarray:
        """P(X >= x) in every coordinate, for each row x of ``points``."""
        points = self._check_points(points)
        return self._orthant(-self.descriptor.mean, -points, as_generator(rng))

    def __call__(self, points: np.ndarray, rng: RandomLike = None) -> np.ndarray:
        """
        Evaluate the tail statistic for a batch of points.

        Parameters
        ----------
        points : np.ndarray
            Points of shape (N, D) or a single point of shape (D,).
        rng : int or Generator, optional
            Seed for the quasi-Monte Carlo integration.

        Returns
        -------
        np.ndarray
            Statistic of shape (N,), values in [0, 1].
        """
        points = self._check_points(points)
        gen = as_generator(rng)
        upper = self._orthant(-self.descriptor.mean, -points, gen)
        lower = self._orthant(self.descriptor.mean, points, gen)
        return np.minimum(upper, 2.0 * lower)

    def _check_points(self, points: np.ndarray) -> np.ndarray:
        points = np.atleast_2d(np.asarray(points, dtype=np.float64))
        if points.shape[1] != self.descriptor.ndim:
            raise ValueError(
                f"Expected points of shape (N, {self.descriptor.ndim}), got {points.shape}"
            )
        return points


def tail_probability(
    points: np.ndarray,
    descriptor: HypervolumeDescriptor,
    rng: RandomLike = None
) -> np.ndarray:
    """Shortcut for ``TailProbability(descriptor)(points, rng)``."""
    return TailProbability(descriptor)(points, rng)
