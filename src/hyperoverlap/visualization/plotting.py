"""
Visualization utilities for hypervolume overlap.

Draws two hypervolumes projected onto a pair of dimensions, each as a
filled confidence ellipse of its Gaussian.
"""

from typing import Optional, Tuple

import numpy as np
import matplotlib.pyplot as plt

from ..core.descriptor import FittedHypervolume, extract_descriptor, extract_descriptors
from ..core.geometry import ellipse_radius, ellipse_polygon, projected_overlap


def _axis_limits(values: np.ndarray, pad: float = 0.2) -> Tuple[float, float]:
    lo, hi = float(np.min(values)), float(np.max(values))
    span = hi - lo
    if span <= 0:
        span = max(abs(lo), 1.0)
    return lo - pad * span, hi + pad * span


def projected_ellipse(
    model,
    dims: Tuple[int, int] = (0, 1),
    level: float = 0.95
) -> np.ndarray:
    """
    Confidence ellipse of a fitted hypervolume projected onto two dimensions.

    Parameters
    ----------
    model : FittedHypervolume or mapping
        Fitted model. Its observations, when present, set the ellipse
        radius through their count.
    dims : tuple of int
        The two dimensions to project onto.
    level : float
        Confidence level. Default 0.95.

    Returns
    -------
    np.ndarray
        Ellipse polygon of shape (M, 2).
    """
    if not isinstance(model, FittedHypervolume):
        model = FittedHypervolume.from_mapping(model)
    desc = extract_descriptor(model)
    d1, d2 = dims

    if max(d1, d2) >= desc.ndim:
        raise ValueError(f"dims {dims} out of range for {desc.ndim} dimensions")

    obs = model.observations()
    n_obs = None if obs is None else len(obs)
    shape = desc.covariance[np.ix_([d1, d2], [d1, d2])]

    return ellipse_polygon(
        desc.mean[[d1, d2]],
        shape,
        radius=ellipse_radius(level, n_obs),
    )


def plot_overlap(
    hv1,
    hv2,
    dims: Tuple[int, int] = (0, 1),
    col1: str = 'black',
    col2: str = 'blue',
    level: float = 0.95,
    ax: Optional[plt.Axes] = None,
    overlap: Optional[float] = None,
    show_stats: bool = True
) -> plt.Axes:
    """
    Plot two hypervolumes as confidence ellipses on a pair of dimensions.

    Parameters
    ----------
    hv1, hv2 : FittedHypervolume or mapping
        Fitted models. Dimension names must match.
    dims : tuple of int
        Dimensions for the x and y axes. Default (0, 1).
    col1, col2 : str
        Colours of the first and second hypervolume.
    level : float
        Confidence level of the ellipses. Default 0.95.
    ax : plt.Axes, optional
        Matplotlib axes to plot on. Creates new figure if None.
    overlap : float, optional
        Overlap estimate to report in the stats box.
    show_stats : bool
        Whether to show the stats box.

    Returns
    -------
    plt.Axes
        The matplotlib axes object.
    """
    if not isinstance(hv1, FittedHypervolume):
        hv1 = FittedHypervolume.from_mapping(hv1)
    if not isinstance(hv2, FittedHypervolume):
        hv2 = FittedHypervolume.from_mapping(hv2)

    desc1, _ = extract_descriptors(hv1, hv2)
    d1, d2 = dims

    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=(8, 8))

    ell1 = projected_ellipse(hv1, dims, level)
    ell2 = projected_ellipse(hv2, dims, level)

    # Limits cover the observations (or the ellipses when there are none)
    extents = []
    for model, ell in ((hv1, ell1), (hv2, ell2)):
        obs = model.observations()
        extents.append(ell if obs is None else obs[:, [d1, d2]])
    extents = np.vstack(extents)

    for ell, col, label in ((ell1, col1, 'Hypervolume 1'), (ell2, col2, 'Hypervolume 2')):
        ax.fill(ell[:, 0], ell[:, 1], color=col, alpha=0.2, zorder=1)
        closed = np.vstack([ell, ell[0]])
        ax.plot(closed[:, 0], closed[:, 1], color=col, linestyle='--', linewidth=2,
                label=label, zorder=2)

    if show_stats:
        proj = projected_overlap(ell1, ell2)
        lines = []
        if overlap is not None:
            lines.append(f"Overlap: {overlap:.3f}")
        lines.append(f"Projected Jaccard: {proj['jaccard']:.1%}")
        ax.text(
            0.02, 0.98, "\n".join(lines),
            transform=ax.transAxes,
            verticalalignment='top',
            fontfamily='monospace',
            fontsize=9,
            bbox=dict(boxstyle='round', facecolor='white', alpha=0.8)
        )

    ax.set_xlim(*_axis_limits(extents[:, 0]))
    ax.set_ylim(*_axis_limits(extents[:, 1]))
    ax.set_xlabel(desc1.dimension_names[d1], fontsize=15)
    ax.set_ylabel(desc1.dimension_names[d2], fontsize=15)
    ax.tick_params(labelsize=15)
    ax.legend(loc='upper right')
    ax.grid(True, alpha=0.3)

    return ax
