"""
Visualization utilities.
"""

from .plotting import projected_ellipse, plot_overlap

__all__ = ['projected_ellipse', 'plot_overlap']
