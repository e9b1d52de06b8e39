"""
Options controlling an overlap run.

Mirrors the arguments of the original ``overlapMBH`` call, plus the knobs
the Python estimator adds (threshold, seeding, worker count).
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


# Score a point must exceed to count as included in the other hypervolume
INCLUSION_THRESHOLD = 0.05

DEFAULT_NDRAWS = 99


@dataclass(frozen=True)
class OverlapConfig:
    """
    Validated options for ``overlap_mbh``.

    Attributes
    ----------
    overlap : bool
        Run the overlap estimation. This can be slow. Default True.
    plot : bool
        Draw the two projected ellipses. Independent of ``overlap``.
        Default True.
    dims : tuple of int
        Pair of 0-based dimension indices to plot. Default (0, 1).
    col1, col2 : str
        Matplotlib colours for the first and second hypervolume.
    proppoints : float
        Points sampled from each hypervolume as a proportion of its volume.
        Default 1. Reduce to cut computation time.
    ndraws : int
        Null draws per inclusion test. Default 99. Fewer draws are faster
        but give a less precise estimate.
    threshold : float
        Inclusion score above which a point counts as included. Default 0.05.
    seed : int, optional
        Seed for sampling, subsampling and the integration QMC.
    n_jobs : int
        Worker threads for tail-probability evaluation; -1 uses all cores.
    level : float
        Confidence level of the plotted ellipses. Default 0.95.
    """
    overlap: bool = True
    plot: bool = True
    dims: Tuple[int, int] = (0, 1)
    col1: str = 'black'
    col2: str = 'blue'
    proppoints: float = 1.0
    ndraws: int = DEFAULT_NDRAWS
    threshold: float = INCLUSION_THRESHOLD
    seed: Optional[int] = None
    n_jobs: int = 1
    level: float = 0.95

    def __post_init__(self):
        if len(self.dims) != 2:
            raise ValueError(f"dims must name exactly two dimensions, got {self.dims}")
        if any(int(d) != d or d < 0 for d in self.dims):
            raise ValueError(f"dims must be non-negative integers, got {self.dims}")
        if self.dims[0] == self.dims[1]:
            raise ValueError(f"dims must be two different dimensions, got {self.dims}")
        object.__setattr__(self, 'dims', (int(self.dims[0]), int(self.dims[1])))

        if not np.isfinite(self.proppoints) or self.proppoints <= 0:
            raise ValueError(f"proppoints must be positive, got {self.proppoints}")
        if int(self.ndraws) != self.ndraws or self.ndraws < 1:
            raise ValueError(f"ndraws must be a positive integer, got {self.ndraws}")
        object.__setattr__(self, 'ndraws', int(self.ndraws))

        if not 0 <= self.threshold < 1:
            raise ValueError(f"threshold must be in [0, 1), got {self.threshold}")
        if not 0 < self.level < 1:
            raise ValueError(f"level must be in (0, 1), got {self.level}")
        if self.n_jobs == 0 or self.n_jobs < -1:
            raise ValueError(f"n_jobs must be positive or -1, got {self.n_jobs}")
