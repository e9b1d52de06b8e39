"""
Core types: descriptors, configuration, errors and geometry.
"""

from .config import INCLUSION_THRESHOLD, DEFAULT_NDRAWS, OverlapConfig
from .descriptor import (
    FittedHypervolume,
    HypervolumeDescriptor,
    stack_groups,
    pooled_mean,
    extract_descriptor,
    extract_descriptors,
    check_dimensions,
)
from .errors import (
    HyperoverlapError,
    DimensionMismatchError,
    InsufficientSampleError,
    TailProbabilityError,
    OverlapCancelledError,
)
from .geometry import (
    EPS,
    ellipse_radius,
    ellipse_polygon,
    polygon_area,
    ensure_ccw,
    shapely_to_numpy,
    projected_overlap,
)

__all__ = [
    'INCLUSION_THRESHOLD',
    'DEFAULT_NDRAWS',
    'OverlapConfig',
    'FittedHypervolume',
    'HypervolumeDescriptor',
    'stack_groups',
    'pooled_mean',
    'extract_descriptor',
    'extract_descriptors',
    'check_dimensions',
    'HyperoverlapError',
    'DimensionMismatchError',
    'InsufficientSampleError',
    'TailProbabilityError',
    'OverlapCancelledError',
    'EPS',
    'ellipse_radius',
    'ellipse_polygon',
    'polygon_area',
    'ensure_ccw',
    'shapely_to_numpy',
    'projected_overlap',
]
