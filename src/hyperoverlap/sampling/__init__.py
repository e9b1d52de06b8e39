"""
Point simulation from hypervolume Gaussians.
"""

from .sampler import RandomLike, as_generator, sample_size, sample_points

__all__ = ['RandomLike', 'as_generator', 'sample_size', 'sample_points']
