"""
Hyperoverlap - Monte Carlo overlap of Gaussian hypervolumes.

This package estimates how much two multivariate regions overlap when each
is summarised by a mean vector, a covariance matrix and a volume:
- Points are simulated from each region, in proportion to its volume
- Every point is tested for inclusion in the other region by ranking its
  orthant tail probability against a null sample from that region
- The included counts are combined into a volume-normalised statistic

Main Functions
--------------
overlap_mbh : Overlap (and plot) of two fitted hypervolume models
estimate_overlap : Overlap of two hypervolume descriptors
inclusion_score : Inclusion test of one point against a hypervolume
sample_points : Simulate points from a hypervolume
plot_overlap : Projected confidence ellipses of two hypervolumes

Example
-------
>>> import numpy as np
>>> from hyperoverlap import HypervolumeDescriptor, estimate_overlap

>>> hv = HypervolumeDescriptor(('x', 'y'), np.zeros(2), np.eye(2), volume=200)
>>> overlap = estimate_overlap(hv, hv, ndraws=99, seed=1)
"""

from .core.config import INCLUSION_THRESHOLD, OverlapConfig
from .core.descriptor import (
    FittedHypervolume,
    HypervolumeDescriptor,
    extract_descriptor,
    extract_descriptors,
    check_dimensions,
)
from .core.errors import (
    HyperoverlapError,
    DimensionMismatchError,
    InsufficientSampleError,
    TailProbabilityError,
    OverlapCancelledError,
)
from .sampling.sampler import sample_size, sample_points
from .inclusion.tail import TailProbability, tail_probability
from .inclusion.tester import inclusion_score, score_candidates
from .overlap.aggregator import CancellationToken, overlap_stats, estimate_overlap
from .overlap.pipeline import overlap_mbh
from .visualization.plotting import plot_overlap

__all__ = [
    # Configuration
    'INCLUSION_THRESHOLD',
    'OverlapConfig',
    # Descriptors
    'FittedHypervolume',
    'HypervolumeDescriptor',
    'extract_descriptor',
    'extract_descriptors',
    'check_dimensions',
    # Errors
    'HyperoverlapError',
    'DimensionMismatchError',
    'InsufficientSampleError',
    'TailProbabilityError',
    'OverlapCancelledError',
    # Sampling
    'sample_size',
    'sample_points',
    # Inclusion test
    'TailProbability',
    'tail_probability',
    'inclusion_score',
    'score_candidates',
    # Overlap
    'CancellationToken',
    'overlap_stats',
    'estimate_overlap',
    'overlap_mbh',
    # Visualization
    'plot_overlap',
]
