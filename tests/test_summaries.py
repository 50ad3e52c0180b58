from __future__ import annotations

import importlib.util
import math
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


def _normal_cdf(q: float, mean: float, sd: float) -> float:
    return 0.5 * (1.0 + math.erf((q - mean) / (sd * math.sqrt(2.0))))


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for summary tests")
class CrossDrawSummaryTests(unittest.TestCase):
    def _normal_rvar(self):
        import numpy as np

        from rvar_jax import RandomVariable

        rng = np.random.default_rng(5678)
        return RandomVariable(rng.normal(loc=[1.0, 2.0, 3.0, 4.0], scale=2.0, size=(10000, 4)))

    def test_expectation_recovers_means(self) -> None:
        import numpy as np

        from rvar_jax import E, RandomVariable, mean

        x = self._normal_rvar()
        np.testing.assert_allclose(np.asarray(E(x)), [1.0, 2.0, 3.0, 4.0], atol=0.1)
        np.testing.assert_allclose(np.asarray(mean(x)), np.asarray(x.mean()))
        self.assertNotIsInstance(E(x), RandomVariable)
        self.assertEqual(E(x).shape, (4,))

    def test_probability_matches_normal_tail(self) -> None:
        import numpy as np

        from rvar_jax import Pr

        x = self._normal_rvar()
        expected = [_normal_cdf(1.5, m, 2.0) for m in (1.0, 2.0, 3.0, 4.0)]
        np.testing.assert_allclose(np.asarray(Pr(x < 1.5)), expected, atol=0.03)

    def test_probability_requires_boolean_draws(self) -> None:
        from rvar_jax import Pr, RVarTypeError

        x = self._normal_rvar()
        with self.assertRaises(RVarTypeError) as cm:
            Pr(x)
        self.assertIsInstance(cm.exception, TypeError)
        self.assertIn("logical", str(cm.exception))
        with self.assertRaises(RVarTypeError):
            Pr([1.0, 0.0])

    def test_probability_of_plain_boolean_array(self) -> None:
        import numpy as np

        from rvar_jax import Pr

        np.testing.assert_allclose(np.asarray(Pr([True, False])), [1.0, 0.0])

    def test_median_and_variance(self) -> None:
        import numpy as np

        from rvar_jax import median, variance

        x = self._normal_rvar()
        np.testing.assert_allclose(np.asarray(median(x)), [1.0, 2.0, 3.0, 4.0], atol=0.1)
        np.testing.assert_allclose(np.asarray(variance(x)), [4.0] * 4, atol=0.3)

    def test_variance_uses_sample_denominator(self) -> None:
        import numpy as np

        from rvar_jax import RandomVariable, variance

        x = RandomVariable(np.array([1.0, 2.0, 3.0, 4.0]))
        self.assertAlmostEqual(float(variance(x)), np.var([1.0, 2.0, 3.0, 4.0], ddof=1), places=5)

    def test_missing_values_are_ignored_on_request(self) -> None:
        import numpy as np

        from rvar_jax import E, RandomVariable, median

        x = RandomVariable(np.array([[1.0, 1.0], [np.nan, 2.0], [3.0, 3.0]]))
        self.assertTrue(np.isnan(np.asarray(E(x))[0]))
        np.testing.assert_allclose(np.asarray(E(x, na_rm=True)), [2.0, 2.0])
        np.testing.assert_allclose(np.asarray(median(x, na_rm=True)), [2.0, 2.0])

    def test_missing_value_flags(self) -> None:
        import numpy as np

        from rvar_jax import RandomVariable, any_na, is_na

        x = RandomVariable(np.array([[1.0, 1.0], [np.nan, 2.0]]))
        np.testing.assert_array_equal(np.asarray(is_na(x)), [True, False])
        self.assertTrue(any_na(x))
        self.assertFalse(any_na(x[1]))

    def test_plain_array_is_a_constant(self) -> None:
        import numpy as np

        from rvar_jax import E

        np.testing.assert_allclose(np.asarray(E([[1.0, 2.0], [3.0, 4.0]])), [[1.0, 2.0], [3.0, 4.0]])


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for summary tests")
class WithinDrawSummaryTests(unittest.TestCase):
    def _repeated(self, nchains: int = 1):
        import numpy as np

        from rvar_jax import RandomVariable

        return RandomVariable(np.tile([1.0, 2.0, 3.0, 4.0], (100, 1)), nchains=nchains)

    def test_sum_is_one_value_per_draw(self) -> None:
        import numpy as np

        from rvar_jax import RandomVariable, rvar_sum

        out = rvar_sum(self._repeated())
        self.assertIsInstance(out, RandomVariable)
        self.assertEqual(out.shape, (1,))
        self.assertEqual(out.ndraws, 100)
        np.testing.assert_allclose(np.asarray(out.data), np.full((100, 1), 10.0))

    def test_reducers_per_draw(self) -> None:
        import numpy as np

        x = self._repeated()
        cases = {
            "prod": 24.0,
            "min": 1.0,
            "max": 4.0,
        }
        for name, expected in cases.items():
            with self.subTest(reducer=name):
                out = getattr(x, name)()
                np.testing.assert_allclose(np.asarray(out.data), np.full((100, 1), expected))

    def test_within_draw_mean_and_median(self) -> None:
        import numpy as np

        from rvar_jax import rvar_mean, rvar_median

        x = self._repeated()
        np.testing.assert_allclose(np.asarray(rvar_mean(x).data), np.full((100, 1), 2.5))
        np.testing.assert_allclose(np.asarray(rvar_median(x).data), np.full((100, 1), 2.5))

    def test_range_is_min_then_max(self) -> None:
        import numpy as np

        from rvar_jax import rvar_range

        out = rvar_range(self._repeated())
        self.assertEqual(out.shape, (2,))
        np.testing.assert_allclose(np.asarray(out.data), np.tile([1.0, 4.0], (100, 1)))

    def test_operands_are_concatenated_per_draw(self) -> None:
        import numpy as np

        from rvar_jax import RandomVariable, rvar_max, rvar_sum

        x = self._repeated(nchains=4)
        y = RandomVariable(np.arange(100.0).reshape(100, 1), nchains=4)
        out = rvar_sum(x, 5.0, [[1.0, 1.0]])
        np.testing.assert_allclose(np.asarray(out.data), np.full((100, 1), 17.0))
        self.assertEqual(out.nchains, 4)

        biggest = rvar_max(x, y)
        np.testing.assert_allclose(np.asarray(biggest.data[:, 0]), np.maximum(np.arange(100.0), 4.0))

    def test_chain_disagreement_is_not_an_error(self) -> None:
        from rvar_jax import rvar_sum

        out = rvar_sum(self._repeated(nchains=4), self._repeated(nchains=5))
        self.assertEqual(out.nchains, 1)

    def test_all_and_any(self) -> None:
        import numpy as np

        from rvar_jax import RandomVariable, rvar_all, rvar_any

        x = RandomVariable(np.array([[True, True], [True, False], [False, False]]))
        np.testing.assert_array_equal(np.asarray(rvar_all(x).data[:, 0]), [True, False, False])
        np.testing.assert_array_equal(np.asarray(rvar_any(x).data[:, 0]), [True, True, False])

    def test_missing_values_within_draws(self) -> None:
        import numpy as np

        from rvar_jax import RandomVariable, rvar_range, rvar_sum

        x = RandomVariable(np.array([[1.0, np.nan, 3.0], [4.0, 5.0, 6.0]]))
        self.assertTrue(np.isnan(np.asarray(rvar_sum(x).data)[0, 0]))
        np.testing.assert_allclose(np.asarray(rvar_sum(x, na_rm=True).data[:, 0]), [4.0, 15.0])
        np.testing.assert_allclose(np.asarray(rvar_range(x, na_rm=True).data), [[1.0, 3.0], [4.0, 6.0]])

    def test_empty_input_raises_value_error(self) -> None:
        import numpy as np

        from rvar_jax import RandomVariable, rvar_min, rvar_range

        empty = RandomVariable(np.zeros((3, 0)))
        with self.assertRaises(ValueError):
            rvar_min(empty)
        with self.assertRaises(ValueError):
            rvar_range(empty)
        with self.assertRaises(ValueError):
            rvar_min()

    def test_mismatched_draws_raise(self) -> None:
        import numpy as np

        from rvar_jax import DrawMismatchError, RandomVariable, rvar_sum

        with self.assertRaises(DrawMismatchError):
            rvar_sum(RandomVariable(np.zeros(3)), RandomVariable(np.zeros(4)))


if __name__ == "__main__":
    unittest.main()
