"""
Hypervolume descriptors.

Contains:
- FittedHypervolume, the input record produced by an upstream model fit
- HypervolumeDescriptor, the flat (names, mean, covariance, volume) summary
- Extraction, with grouped means pooled across groups
- The dimension-name precondition shared by every comparison
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

import numpy as np

from .errors import DimensionMismatchError


# Relative tolerance for the symmetry check
COV_TOL = 1e-8

# Eigenvalue cutoff relative to the largest eigenvalue, as in scipy.stats
PSD_TOL = 1e6 * np.finfo(np.float64).eps


@dataclass
class FittedHypervolume:
    """
    A fitted hypervolume model, as handed over by the model-fitting step.

    Attributes
    ----------
    dimensions : sequence of str
        Ordered dimension (variable) names.
    means : np.ndarray
        Fitted means. Either a vector of shape (D,), a matrix of shape
        (n_obs, D), or for grouped models a stack of shape
        (n_obs, D, n_groups).
    covariance : np.ndarray
        Covariance matrix of shape (D, D).
    volume : float
        Volume of the hypervolume, computed upstream.
    group_means : np.ndarray, optional
        Present only for grouped models. Its presence switches extraction
        to pooling ``means`` across groups.
    Y : np.ndarray, optional
        Raw observations of shape (n_obs, D) or (n_obs, D, n_groups).
        Only used for plotting.
    """
    dimensions: Sequence[str]
    means: np.ndarray
    covariance: np.ndarray
    volume: float
    group_means: Optional[np.ndarray] = None
    Y: Optional[np.ndarray] = None

    @classmethod
    def from_mapping(cls, model: Mapping[str, Any]) -> "FittedHypervolume":
        """
        Build from a mapping keyed like the fitted model list
        (``dimensions``, ``means``, ``covariance``, ``volume``, and
        optionally ``group_means`` and ``Y``).
        """
        missing = [k for k in ('dimensions', 'means', 'covariance', 'volume') if k not in model]
        if missing:
            raise ValueError(f"Fitted model is missing fields: {missing}")

        return cls(
            dimensions=list(model['dimensions']),
            means=np.asarray(model['means'], dtype=np.float64),
            covariance=np.asarray(model['covariance'], dtype=np.float64),
            volume=float(model['volume']),
            group_means=model.get('group_means'),
            Y=None if model.get('Y') is None else np.asarray(model['Y'], dtype=np.float64),
        )

    @property
    def is_grouped(self) -> bool:
        return self.group_means is not None or np.ndim(self.means) == 3

    def observations(self) -> Optional[np.ndarray]:
        """Raw observations as one (n_obs, D) matrix, groups stacked row-wise."""
        if self.Y is None:
            return None
        return stack_groups(np.asarray(self.Y, dtype=np.float64))


@dataclass(frozen=True, eq=False)
class HypervolumeDescriptor:
    """
    Flat Gaussian summary of one hypervolume.

    Attributes
    ----------
    dimension_names : tuple of str
        Ordered dimension names.
    mean : np.ndarray
        Mean vector of shape (D,). Read-only.
    covariance : np.ndarray
        Covariance matrix of shape (D, D). Read-only.
    volume : float
        Positive volume used to scale the sample size.
    """
    dimension_names: Tuple[str, ...]
    mean: np.ndarray
    covariance: np.ndarray
    volume: float

    def __post_init__(self):
        names = tuple(str(n) for n in self.dimension_names)
        mean = np.array(self.mean, dtype=np.float64).reshape(-1)
        cov = np.array(self.covariance, dtype=np.float64)
        d = len(mean)

        if cov.ndim == 0 and d == 1:
            cov = cov.reshape(1, 1)
        if cov.shape != (d, d):
            raise ValueError(f"Expected covariance of shape ({d}, {d}), got {cov.shape}")
        if len(names) != d:
            raise ValueError(f"Got {len(names)} dimension names for a {d}-dimensional mean")
        if not (np.all(np.isfinite(mean)) and np.all(np.isfinite(cov))):
            raise ValueError("Mean and covariance must be finite")

        scale = max(np.max(np.abs(cov)), 1.0)
        if not np.allclose(cov, cov.T, rtol=0.0, atol=COV_TOL * scale):
            raise ValueError("Covariance matrix must be symmetric")
        eigvals = np.linalg.eigvalsh(cov)
        if np.min(eigvals) < -PSD_TOL * np.max(np.abs(eigvals)):
            raise ValueError(
                f"Covariance matrix must be positive-semidefinite, "
                f"smallest eigenvalue is {np.min(eigvals):.3g}"
            )

        volume = float(self.volume)
        if not np.isfinite(volume) or volume <= 0:
            raise ValueError(f"volume must be positive, got {self.volume}")

        mean.setflags(write=False)
        cov.setflags(write=False)
        object.__setattr__(self, 'dimension_names', names)
        object.__setattr__(self, 'mean', mean)
        object.__setattr__(self, 'covariance', cov)
        object.__setattr__(self, 'volume', volume)

    @property
    def ndim(self) -> int:
        return len(self.mean)


def stack_groups(arr: np.ndarray) -> np.ndarray:
    """
    Stack a (n_obs, D, n_groups) array into (n_obs * n_groups, D).

    Two-dimensional input is returned unchanged.
    """
    arr = np.asarray(arr, dtype=np.float64)
    if arr.ndim <= 2:
        return arr
    if arr.ndim != 3:
        raise ValueError(f"Expected a 2D matrix or 3D group stack, got {arr.ndim} dimensions")
    return np.concatenate([arr[:, :, g] for g in range(arr.shape[2])], axis=0)


def pooled_mean(means: np.ndarray, grouped: bool = False) -> np.ndarray:
    """
    Collapse fitted means into a single mean vector.

    Parameters
    ----------
    means : np.ndarray
        Vector (D,), matrix (n_obs, D) or group stack (n_obs, D, n_groups).
    grouped : bool
        Whether ``means`` is a group stack to pool across groups.

    Returns
    -------
    np.ndarray
        Column-wise mean of shape (D,).
    """
    means = np.asarray(means, dtype=np.float64)
    if means.ndim == 1:
        return means.copy()
    if grouped or means.ndim == 3:
        means = stack_groups(means)
    return means.mean(axis=0)


def extract_descriptor(model) -> HypervolumeDescriptor:
    """
    Derive the descriptor of a fitted hypervolume.

    Parameters
    ----------
    model : FittedHypervolume or mapping
        Fitted model. Mappings are converted with
        ``FittedHypervolume.from_mapping``.

    Returns
    -------
    HypervolumeDescriptor
        Names, pooled mean, covariance and volume.
    """
    if isinstance(model, Mapping):
        model = FittedHypervolume.from_mapping(model)

    return HypervolumeDescriptor(
        dimension_names=tuple(model.dimensions),
        mean=pooled_mean(model.means, grouped=model.is_grouped),
        covariance=model.covariance,
        volume=model.volume,
    )


def check_dimensions(desc1: HypervolumeDescriptor, desc2: HypervolumeDescriptor) -> None:
    """
    Require identical dimension names, in the same order.

    Raises
    ------
    DimensionMismatchError
        If the names differ in length, labels or order.
    """
    if tuple(desc1.dimension_names) != tuple(desc2.dimension_names):
        raise DimensionMismatchError(desc1.dimension_names, desc2.dimension_names)


def extract_descriptors(hv1, hv2) -> Tuple[HypervolumeDescriptor, HypervolumeDescriptor]:
    """Extract both descriptors and check that their dimensions match."""
    desc1 = extract_descriptor(hv1)
    desc2 = extract_descriptor(hv2)
    check_dimensions(desc1, desc2)
    return desc1, desc2
