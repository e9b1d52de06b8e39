"""
Exception types raised by the overlap estimator.
"""


class HyperoverlapError(Exception):
    """Base class for errors raised by hyperoverlap."""


class DimensionMismatchError(HyperoverlapError, ValueError):
    """
    The two hypervolumes do not share the same dimension names.

    Names must match in length, labels and order.
    """

    def __init__(self, names1, names2):
        self.names1 = tuple(names1)
        self.names2 = tuple(names2)
        super().__init__(
            "Different variables in each hypervolume or variables in "
            f"different orders: {list(self.names1)} vs {list(self.names2)}"
        )


class InsufficientSampleError(HyperoverlapError, ValueError):
    """A sampled point set is smaller than the number of null draws."""

    def __init__(self, n_points: int, ndraws: int):
        self.n_points = n_points
        self.ndraws = ndraws
        super().__init__(
            f"Number of points to draw ({ndraws}) is greater than number of "
            f"points simulated ({n_points}) - either increase proppoints "
            "or decrease ndraws"
        )


class TailProbabilityError(HyperoverlapError, ArithmeticError):
    """Numerical integration returned an unusable orthant probability."""


class OverlapCancelledError(HyperoverlapError):
    """The estimation was cancelled through its cancellation token."""
