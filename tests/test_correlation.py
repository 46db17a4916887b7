"""
Tests for the streaming correlation engine.
"""

import math

import numpy as np
import pytest

from streamstats import (
    ConfigurationError,
    CorrelationEngine,
    comoments_to_correlation,
    index_accessor,
)

NEGATIVE = [
    [1, -1], [0, 0], [-1, 1], [0, 0], [1, -1], [0, 0],
    [-1, 1], [0, 0], [1, -1], [0, 0], [-1, 1],
]

POSITIVE = [
    [1, 1], [0, 0], [-1, -1], [0, 0], [1, 1], [0, 0],
    [-1, -1], [0, 0], [1, 1], [0, 0], [-1, -1],
]


def paired_engine():
    return (
        CorrelationEngine()
        .set_accessor("d1", lambda d: d[0])
        .set_accessor("d2", lambda d: d[1])
    )


class TestCorrelationState:
    """Getters, setters and their validation."""

    def setup_method(self):
        self.engine = CorrelationEngine()

    def test_empty_defaults(self):
        assert self.engine.get_cov().shape == (0, 0)
        assert self.engine.get_means().shape == (0,)
        assert self.engine.get_num_values() == 0
        assert self.engine.get_accessors() == {}

    def test_cov_round_trip(self):
        cov = [[0, 0], [0, 0]]
        self.engine.set_cov(cov)
        assert self.engine.get_cov().tolist() == cov

        cov = [[2.5, -1.0], [-1.0, 4.0]]
        self.engine.set_cov(np.array(cov))
        np.testing.assert_array_equal(self.engine.get_cov(), cov)

    def test_means_round_trip(self):
        self.engine.set_means([1, 2])
        assert self.engine.get_means().tolist() == [1, 2]

    def test_num_values_round_trip(self):
        self.engine.set_num_values(10)
        assert self.engine.get_num_values() == 10

    def test_setters_chain(self):
        result = self.engine.set_cov([[1.0]]).set_means([0.0]).set_num_values(3)
        assert result is self.engine

    def test_getters_return_copies(self):
        self.engine.set_means([1.0, 2.0])
        means = self.engine.get_means()
        means[0] = 99.0
        assert self.engine.get_means()[0] == 1.0

    def test_setter_does_not_alias_input(self):
        cov = np.eye(2)
        self.engine.set_cov(cov)
        cov[0, 0] = 42.0
        assert self.engine.get_cov()[0, 0] == 1.0

    @pytest.mark.parametrize("bad", ["5", 5, {}, None, math.nan])
    def test_invalid_cov(self, bad):
        with pytest.raises(ConfigurationError):
            self.engine.set_cov(bad)

    @pytest.mark.parametrize(
        "bad", [[1, 2], [["a", "b"], ["c", "d"]], [[1, 2], [3]], [[1, 2, 3], [4, 5, 6]],
                [[True, False], [False, True]], [[1, None], [None, 1]]]
    )
    def test_invalid_cov_contents(self, bad):
        with pytest.raises(ConfigurationError):
            self.engine.set_cov(bad)

    @pytest.mark.parametrize("bad", ["5", 5, {}, None, math.nan, [[1, 2]], ["a"]])
    def test_invalid_means(self, bad):
        with pytest.raises(ConfigurationError):
            self.engine.set_means(bad)

    @pytest.mark.parametrize("bad", ["5", [], {}, None, math.nan, -1, 2.5, False])
    def test_invalid_num_values(self, bad):
        with pytest.raises(ConfigurationError):
            self.engine.set_num_values(bad)

    def test_huge_num_values(self):
        self.engine.set_num_values(10**400)
        assert self.engine.get_num_values() == 10**400

        with pytest.raises(ConfigurationError):
            self.engine.set_num_values(-(10**400))

    def test_rejected_setter_keeps_state(self):
        self.engine.set_cov([[1.0, 0.5], [0.5, 1.0]])
        self.engine.set_means([3.0, 4.0])
        self.engine.set_num_values(7)

        with pytest.raises(ConfigurationError):
            self.engine.set_cov([[1.0, 2.0]])
        with pytest.raises(ConfigurationError):
            self.engine.set_means("bad")
        with pytest.raises(ConfigurationError):
            self.engine.set_num_values(math.nan)

        assert self.engine.get_cov().tolist() == [[1.0, 0.5], [0.5, 1.0]]
        assert self.engine.get_means().tolist() == [3.0, 4.0]
        assert self.engine.get_num_values() == 7


class TestCorrelationAccessors:
    """Accessor registry."""

    def setup_method(self):
        self.engine = CorrelationEngine()

    def test_set_and_get(self):
        x = lambda d: d["x"]  # noqa: E731
        y = lambda d: d["y"]  # noqa: E731

        self.engine.set_accessor("x", x).set_accessor("y", y)

        assert self.engine.get_accessor("x") is x
        assert self.engine.get_accessors() == {"x": x, "y": y}
        assert self.engine.series_names == ["x", "y"]

    def test_missing_accessor(self):
        assert self.engine.get_accessor("d") is None

    def test_overwrite_keeps_order(self):
        first = lambda d: d[0]  # noqa: E731
        replacement = lambda d: d[2]  # noqa: E731
        self.engine.set_accessor("a", first).set_accessor("b", lambda d: d[1])
        self.engine.set_accessor("a", replacement)

        assert self.engine.series_names == ["a", "b"]
        assert self.engine.get_accessor("a") is replacement

    @pytest.mark.parametrize("bad", ["5", 5, [], {}, None, math.nan])
    def test_invalid_accessor(self, bad):
        with pytest.raises(ConfigurationError):
            self.engine.set_accessor("x", bad)
        assert self.engine.get_accessors() == {}

    def test_instances_do_not_share_accessors(self):
        self.engine.set_accessor("x", index_accessor(0))
        assert CorrelationEngine().get_accessors() == {}


class TestCorrelationUpdate:
    """Running updates and emitted correlation matrices."""

    def test_update_without_accessors(self):
        with pytest.raises(ConfigurationError):
            CorrelationEngine().update([1, 2])

    def test_negative_correlation(self):
        engine = paired_engine()
        outputs = [engine.update(record) for record in NEGATIVE]

        assert len(outputs) == len(NEGATIVE)
        np.testing.assert_allclose(outputs[-1], [[1, -1], [-1, 1]], atol=1e-12)

    def test_positive_correlation(self):
        engine = paired_engine()
        for record in POSITIVE:
            result = engine.update(record)

        np.testing.assert_allclose(result, [[1, 1], [1, 1]], atol=1e-12)

    def test_first_observation(self):
        """With one observation the diagonal is 1 and off-diagonals are NaN."""
        engine = paired_engine()
        result = engine.update([3.0, 4.0])

        assert result[0, 0] == 1.0
        assert result[1, 1] == 1.0
        assert math.isnan(result[0, 1])
        assert math.isnan(result[1, 0])
        assert engine.get_num_values() == 1
        np.testing.assert_array_equal(engine.get_means(), [3.0, 4.0])

    def test_constant_series_gives_nan(self):
        engine = paired_engine()
        for x in [1.0, 2.0, 3.0, 4.0]:
            result = engine.update([x, 5.0])
        assert math.isnan(result[0, 1])
        assert result[0, 0] == 1.0

    def test_matches_numpy(self):
        rng = np.random.default_rng(3)
        data = rng.normal(size=(200, 3))
        data[:, 1] += 0.8 * data[:, 0]
        data[:, 2] -= 0.5 * data[:, 1]

        engine = CorrelationEngine()
        for i, name in enumerate(["a", "b", "c"]):
            engine.set_accessor(name, index_accessor(i))
        for row in data:
            result = engine.update(row)

        np.testing.assert_allclose(result, np.corrcoef(data.T), atol=1e-10)
        np.testing.assert_allclose(engine.get_means(), data.mean(axis=0), atol=1e-12)
        np.testing.assert_allclose(engine.sample_covariance(), np.cov(data.T), atol=1e-10)

    def test_cov_stays_exactly_symmetric(self):
        """Mirrored entries of cov and of the emitted correlation are identical."""
        engine = CorrelationEngine()
        for i, name in enumerate(["a", "b", "c"]):
            engine.set_accessor(name, index_accessor(i))
        rng = np.random.default_rng(11)
        for row in rng.normal(size=(200, 3)) * 1e3 + 7.3:
            result = engine.update(row)
            cov = engine.get_cov()
            np.testing.assert_array_equal(cov, cov.T)
            np.testing.assert_array_equal(result, result.T)

    def test_sample_covariance_before_two_values(self):
        engine = paired_engine()
        engine.update([1.0, 2.0])
        assert np.isnan(engine.sample_covariance()).all()

    def test_failing_accessor_leaves_state(self):
        engine = paired_engine()
        engine.update([1.0, 2.0])

        with pytest.raises(IndexError):
            engine.update([1.0])

        assert engine.get_num_values() == 1
        np.testing.assert_array_equal(engine.get_means(), [1.0, 2.0])

    def test_resume_from_seeded_state(self):
        """Seeding a fresh engine with another's state continues the same sequence."""
        first = paired_engine()
        for record in NEGATIVE[:6]:
            first.update(record)

        resumed = paired_engine()
        resumed.set_cov(first.get_cov()).set_means(first.get_means())
        resumed.set_num_values(first.get_num_values())

        for record in NEGATIVE[6:]:
            expected = first.update(record)
            actual = resumed.update(record)
            np.testing.assert_allclose(actual, expected)

    def test_state_shape_mismatch(self):
        engine = paired_engine()
        engine.set_means([0.0, 0.0, 0.0])
        with pytest.raises(ConfigurationError):
            engine.update([1, 2])

    def test_seeding_means_only(self):
        """An accumulator left empty is zero-filled independently of the others."""
        engine = paired_engine()
        engine.set_means([1, 2]).set_num_values(3)

        engine.update([1, 2])

        assert engine.get_num_values() == 4
        np.testing.assert_array_equal(engine.get_means(), [1.0, 2.0])
        np.testing.assert_array_equal(engine.get_cov(), np.zeros((2, 2)))

    def test_seeding_cov_only(self):
        engine = paired_engine()
        engine.set_cov([[2.0, 1.0], [1.0, 2.0]]).set_num_values(3)

        engine.update([0.0, 0.0])

        assert engine.get_num_values() == 4
        np.testing.assert_array_equal(engine.get_means(), [0.0, 0.0])


class TestFoldArray:
    """Bulk folding through the numba kernel."""

    def test_matches_updates(self):
        data = np.random.default_rng(5).normal(size=(100, 2))

        looped = paired_engine()
        for row in data:
            expected = looped.update(row)

        bulk = paired_engine()
        result = bulk.fold_array(data)

        np.testing.assert_allclose(result, expected, atol=1e-12)
        np.testing.assert_allclose(bulk.get_cov(), looped.get_cov(), atol=1e-9)
        assert bulk.get_num_values() == 100

    def test_fold_keeps_cov_symmetric(self):
        data = np.random.default_rng(9).normal(size=(300, 3)) * 1e3 + 7.3
        engine = CorrelationEngine()
        for i, name in enumerate(["a", "b", "c"]):
            engine.set_accessor(name, index_accessor(i))

        result = engine.fold_array(data)

        cov = engine.get_cov()
        np.testing.assert_array_equal(cov, cov.T)
        np.testing.assert_array_equal(result, result.T)

    def test_fold_then_update(self):
        engine = paired_engine()
        engine.fold_array(np.array(NEGATIVE[:5], dtype=float))
        for record in NEGATIVE[5:]:
            result = engine.update(record)
        np.testing.assert_allclose(result, [[1, -1], [-1, 1]], atol=1e-12)

    def test_empty_block(self):
        engine = paired_engine()
        assert engine.fold_array(np.zeros((0, 2))) is None
        assert engine.get_num_values() == 0

    def test_wrong_width(self):
        with pytest.raises(ValueError):
            paired_engine().fold_array(np.zeros((3, 3)))


class TestComomentsToCorrelation:
    def test_identity(self):
        np.testing.assert_array_equal(comoments_to_correlation(np.eye(3)), np.eye(3))

    def test_scaled(self):
        cov = np.array([[4.0, 2.0], [2.0, 9.0]])
        result = comoments_to_correlation(cov)
        assert result[0, 1] == pytest.approx(2.0 / 6.0)
