"""
Core geometry operations for projected ellipses.

Contains utility functions for:
- Confidence ellipse radii and polygon approximations
- Polygon area calculation
- Vertex ordering (CCW)
- Shapely/numpy conversions
- Overlap of two projected ellipses
"""

from typing import Optional

import numpy as np
from scipy import stats
from shapely.geometry import Polygon, MultiPolygon


# Numerical tolerance for floating point comparisons
EPS = 1e-10


def ellipse_radius(level: float = 0.95, n_obs: Optional[int] = None) -> float:
    """
    Radius of a bivariate confidence ellipse.

    Parameters
    ----------
    level : float
        Confidence level in (0, 1). Default 0.95.
    n_obs : int, optional
        Number of observations behind the covariance. When given the
        radius is ``sqrt(2 * F(level; 2, n_obs))``, otherwise the
        large-sample limit ``sqrt(chi2(level; 2))``.

    Returns
    -------
    float
        Radius in units of the shape matrix.
    """
    if not 0 < level < 1:
        raise ValueError(f"level must be in (0, 1), got {level}")

    if n_obs is None:
        return float(np.sqrt(stats.chi2.ppf(level, 2)))
    if n_obs < 1:
        raise ValueError(f"n_obs must be positive, got {n_obs}")
    return float(np.sqrt(2 * stats.f.ppf(level, 2, n_obs)))


def ellipse_polygon(
    center: np.ndarray,
    shape: np.ndarray,
    radius: float = 1.0,
    n_vertices: int = 100
) -> np.ndarray:
    """
    Approximate the ellipse {x : (x - c)' S^-1 (x - c) <= r^2} by a polygon.

    Uses the eigen decomposition of the shape matrix so that singular
    (degenerate) shapes collapse to a segment instead of failing.

    Parameters
    ----------
    center : np.ndarray
        Ellipse center of shape (2,).
    shape : np.ndarray
        Symmetric shape matrix of shape (2, 2).
    radius : float
        Scaling radius.
    n_vertices : int
        Number of polygon vertices.

    Returns
    -------
    np.ndarray
        Vertices of shape (n_vertices, 2) in counter-clockwise order.
    """
    center = np.asarray(center, dtype=np.float64).reshape(-1)
    shape = np.asarray(shape, dtype=np.float64)

    if center.shape != (2,) or shape.shape != (2, 2):
        raise ValueError(f"Expected a 2D center and (2, 2) shape, got {center.shape} and {shape.shape}")

    eigvals, eigvecs = np.linalg.eigh(shape)
    root = eigvecs * np.sqrt(np.clip(eigvals, 0.0, None))

    angles = np.linspace(0.0, 2 * np.pi, n_vertices, endpoint=False)
    unit_circle = np.column_stack([np.cos(angles), np.sin(angles)])
    poly = center + radius * unit_circle @ root.T

    return ensure_ccw(poly)


def polygon_area(poly: np.ndarray) -> float:
    """
    Area enclosed by a simple polygon (shoelace formula).

    Parameters
    ----------
    poly : np.ndarray
        Polygon vertices of shape (M, 2).

    Returns
    -------
    float
        Area of the polygon.
    """
    n = len(poly)
    if n < 3:
        return 0.0

    x, y = poly[:, 0], poly[:, 1]
    return float(0.5 * abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))))


def ensure_ccw(poly: np.ndarray) -> np.ndarray:
    """
    Ensure polygon vertices are in counter-clockwise order.

    Parameters
    ----------
    poly : np.ndarray
        Polygon vertices of shape (M, 2).

    Returns
    -------
    np.ndarray
        Polygon vertices in CCW order.
    """
    x = poly[:, 0]
    y = poly[:, 1]
    signed_area = 0.5 * np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y)

    if signed_area < 0:
        return poly[::-1].copy()
    return poly


def shapely_to_numpy(geom) -> np.ndarray:
    """
    Convert a Shapely polygon to numpy array of vertices.

    Parameters
    ----------
    geom : Polygon or MultiPolygon
        Shapely geometry object.

    Returns
    -------
    np.ndarray
        Polygon vertices of shape (M, 2). Empty geometries give shape (0, 2).
    """
    if geom.is_empty:
        return np.empty((0, 2))

    if isinstance(geom, MultiPolygon):
        # Take the largest polygon if we got multiple
        geom = max(geom.geoms, key=lambda g: g.area)

    coords = np.array(geom.exterior.coords)
    # Remove the closing duplicate vertex that Shapely adds
    if len(coords) > 1 and np.allclose(coords[0], coords[-1]):
        coords = coords[:-1]
    return coords


def projected_overlap(poly1: np.ndarray, poly2: np.ndarray) -> dict:
    """
    Overlap of two 2D polygons (typically projected confidence ellipses).

    Parameters
    ----------
    poly1, poly2 : np.ndarray
        Polygon vertices of shape (M, 2).

    Returns
    -------
    dict
        Statistics including:
        - area1, area2: Polygon areas
        - intersection_area: Area shared by both polygons
        - jaccard: Intersection over union (0 when the union is empty)
        - intersection: Vertices of the (largest) intersection polygon
    """
    poly1 = np.asarray(poly1, dtype=np.float64).reshape(-1, 2)
    poly2 = np.asarray(poly2, dtype=np.float64).reshape(-1, 2)
    shape1 = Polygon(poly1) if len(poly1) >= 3 else Polygon()
    shape2 = Polygon(poly2) if len(poly2) >= 3 else Polygon()

    if not shape1.is_valid:
        shape1 = shape1.buffer(0)
    if not shape2.is_valid:
        shape2 = shape2.buffer(0)

    inter = shape1.intersection(shape2)
    union_area = shape1.union(shape2).area
    inter_area = inter.area

    if isinstance(inter, (Polygon, MultiPolygon)):
        inter_vertices = shapely_to_numpy(inter)
    else:
        # Lines or points carry no area
        inter_vertices = np.empty((0, 2))

    return {
        'area1': polygon_area(poly1),
        'area2': polygon_area(poly2),
        'intersection_area': float(inter_area),
        'jaccard': float(inter_area / union_area) if union_area > EPS else 0.0,
        'intersection': inter_vertices,
    }
