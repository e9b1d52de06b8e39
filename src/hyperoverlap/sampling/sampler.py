"""
Point Sampler

Draws points from a hypervolume's Gaussian. The number of points is
proportional to the hypervolume's volume so that the density of simulated
points is the same in both hypervolumes being compared.
"""

from typing import Optional, Union

import numpy as np

from ..core.descriptor import HypervolumeDescriptor


RandomLike = Optional[Union[int, np.random.Generator, np.random.SeedSequence]]


def as_generator(rng: RandomLike = None) -> np.random.Generator:
    """Coerce a seed, SeedSequence or Generator into a Generator."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def sample_size(descriptor: HypervolumeDescriptor, proportion: float) -> int:
    """
    Number of points to simulate from a hypervolume.

    Rounds ``volume * proportion`` half to even and never returns less
    than one point.
    """
    if not np.isfinite(proportion) or proportion <= 0:
        raise ValueError(f"proportion must be positive, got {proportion}")
    return max(1, int(np.round(descriptor.volume * proportion)))


def sample_points(
    descriptor: HypervolumeDescriptor,
    proportion: float = 1.0,
    rng: RandomLike = None
) -> np.ndarray:
    """
    Simulate points from the Gaussian of a hypervolume.

    Parameters
    ----------
    descriptor : HypervolumeDescriptor
        Hypervolume to sample from.
    proportion : float
        Points per unit volume. Default 1.
    rng : int, Generator or SeedSequence, optional
        Randomness source. The same seed gives the same points.

    Returns
    -------
    np.ndarray
        Read-only array of shape (N, D) with N = round(volume * proportion).
    """
    n_points = sample_size(descriptor, proportion)
    gen = as_generator(rng)

    # Eigen decomposition tolerates near-singular covariances
    points = gen.multivariate_normal(
        descriptor.mean,
        descriptor.covariance,
        size=n_points,
        method='eigh',
    )
    points.setflags(write=False)
    return points
