"""
End-to-end overlap of two fitted hypervolumes.

Extracts the descriptors, runs the estimator and draws the projected
ellipses, as selected by an ``OverlapConfig``.
"""

from dataclasses import replace
from typing import Optional
import logging

import matplotlib.pyplot as plt

from ..core.config import OverlapConfig
from ..core.descriptor import extract_descriptors
from ..visualization.plotting import plot_overlap
from .aggregator import CancellationToken, ProgressCallback, estimate_overlap


logger = logging.getLogger(__name__)


def overlap_mbh(
    hv1,
    hv2,
    config: Optional[OverlapConfig] = None,
    *,
    ax: Optional[plt.Axes] = None,
    progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
    **options
) -> Optional[float]:
    """
    Calculate (and optionally plot) the overlap between two hypervolumes.

    Simulates points from each hypervolume, with the number of points
    proportional to its volume, and counts how many points of each are
    statistically indistinguishable from the other. The statistic is the
    total number of shared points divided by the total volume. Can be very
    slow for large hypervolumes: lowering ``proppoints`` or ``ndraws`` speeds
    it up at the cost of precision.

    Parameters
    ----------
    hv1, hv2 : FittedHypervolume or mapping
        Fitted models with matching dimension names.
    config : OverlapConfig, optional
        Options. Defaults to ``OverlapConfig()``.
    ax : plt.Axes, optional
        Axes for the plot. Creates new figure if None.
    progress : callable, optional
        ``progress(direction, completed, total)`` during the estimation.
    cancel_token : CancellationToken, optional
        Set it from another thread to abort the estimation.
    **options
        Overrides of individual ``OverlapConfig`` fields, e.g.
        ``proppoints=0.5`` or ``plot=False``.

    Returns
    -------
    float or None
        The overlap estimate, or None when ``overlap`` is False.
    """
    config = OverlapConfig(**options) if config is None else replace(config, **options)

    desc1, desc2 = extract_descriptors(hv1, hv2)

    result = None
    if config.overlap:
        result = estimate_overlap(
            desc1,
            desc2,
            config.proppoints,
            config.ndraws,
            threshold=config.threshold,
            seed=config.seed,
            n_jobs=config.n_jobs,
            progress=progress,
            cancel_token=cancel_token,
        )

    if config.plot:
        logger.debug("Plotting dimensions %s", config.dims)
        plot_overlap(
            hv1,
            hv2,
            dims=config.dims,
            col1=config.col1,
            col2=config.col2,
            level=config.level,
            ax=ax,
            overlap=result,
        )

    return result
