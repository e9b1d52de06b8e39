"""
Tests for the configuration record and the overlap_mbh entry point.
"""

from dataclasses import FrozenInstanceError

import numpy as np
import pytest
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from hyperoverlap import (
    OverlapConfig,
    FittedHypervolume,
    DimensionMismatchError,
    InsufficientSampleError,
    overlap_mbh,
)


def _model(mean=(0.0, 0.0), volume=40.0, dimensions=('length', 'width'), seed=0):
    rng = np.random.default_rng(seed)
    Y = rng.normal(size=(30, len(mean))) + np.asarray(mean)
    return {
        'dimensions': list(dimensions),
        'means': np.tile(np.asarray(mean, dtype=float), (30, 1)),
        'covariance': np.eye(len(mean)),
        'volume': volume,
        'Y': Y,
    }


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')


class TestOverlapConfig:
    """Tests for OverlapConfig validation."""

    def test_defaults(self):
        """Defaults mirror the original call signature."""
        config = OverlapConfig()

        assert config.overlap and config.plot
        assert config.dims == (0, 1)
        assert (config.col1, config.col2) == ('black', 'blue')
        assert config.proppoints == 1.0
        assert config.ndraws == 99
        assert config.threshold == 0.05

    def test_frozen(self):
        """Configs are immutable."""
        with pytest.raises(FrozenInstanceError):
            OverlapConfig().ndraws = 5

    @pytest.mark.parametrize("options", [
        {'proppoints': 0.0},
        {'proppoints': -1.0},
        {'ndraws': 0},
        {'ndraws': 9.5},
        {'dims': (0, 0)},
        {'dims': (0, 1, 2)},
        {'dims': (-1, 1)},
        {'threshold': 1.0},
        {'level': 1.5},
        {'n_jobs': 0},
    ])
    def test_invalid_options(self, options):
        """Invalid options are rejected on construction."""
        with pytest.raises(ValueError):
            OverlapConfig(**options)

    def test_integer_like_values_normalised(self):
        """Float-valued integers are accepted and stored as int."""
        config = OverlapConfig(ndraws=20.0, dims=[2.0, 1.0])
        assert config.ndraws == 20 and isinstance(config.ndraws, int)
        assert config.dims == (2, 1)


class TestOverlapMBH:
    """Tests for overlap_mbh()."""

    def test_returns_overlap(self):
        """With plotting off only the estimate is computed."""
        result = overlap_mbh(_model(), _model(mean=(0.5, 0.0)), plot=False, ndraws=19, seed=1)
        assert isinstance(result, float)
        assert result >= 0

    def test_overlap_off_returns_none(self):
        """Plot only: no estimate, ellipses drawn on the given axes."""
        fig, ax = plt.subplots()
        result = overlap_mbh(_model(), _model(mean=(2.0, 1.0)), overlap=False, ax=ax)

        assert result is None
        assert len(ax.lines) == 2
        assert ax.get_xlabel() == 'length'
        assert ax.get_ylabel() == 'width'

    def test_overlap_and_plot(self):
        """Plotting still happens when the estimate is computed."""
        fig, ax = plt.subplots()
        result = overlap_mbh(_model(), _model(mean=(0.5, 0.5)), ndraws=19, seed=2, ax=ax)

        assert result is not None
        assert len(ax.lines) == 2
        assert any('Overlap' in t.get_text() for t in ax.texts)

    def test_config_with_overrides(self):
        """Keyword options override fields of a given config."""
        config = OverlapConfig(plot=False, ndraws=500)

        with pytest.raises(InsufficientSampleError):
            overlap_mbh(_model(), _model(), config)

        result = overlap_mbh(_model(), _model(), config, ndraws=19, seed=3)
        assert result > 0

    def test_seeded_runs_repeat(self):
        """A fixed seed gives the same estimate."""
        a = overlap_mbh(_model(), _model(mean=(1.0, 0.0)), plot=False, ndraws=19, seed=7)
        b = overlap_mbh(_model(), _model(mean=(1.0, 0.0)), plot=False, ndraws=19, seed=7)
        assert a == b

    def test_dimension_mismatch_before_work(self):
        """Mismatched names fail even when nothing would be computed."""
        hv2 = _model(dimensions=('width', 'length'))
        with pytest.raises(DimensionMismatchError):
            overlap_mbh(_model(), hv2, overlap=False, plot=False)

    def test_unknown_option(self):
        """Unknown options are a TypeError."""
        with pytest.raises(TypeError):
            overlap_mbh(_model(), _model(), plot=False, colour='red')

    def test_fitted_hypervolume_input(self):
        """FittedHypervolume records are accepted as well as mappings."""
        hv = FittedHypervolume.from_mapping(_model())
        result = overlap_mbh(hv, hv, plot=False, ndraws=19, seed=4)
        assert result > 0

    def test_progress_forwarded(self):
        """The progress callback reaches the estimator."""
        calls = []
        overlap_mbh(_model(), _model(), plot=False, ndraws=19, seed=5,
                    progress=lambda *args: calls.append(args))
        assert {c[0] for c in calls} == {'hv1 in hv2', 'hv2 in hv1'}
