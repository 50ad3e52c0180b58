from __future__ import annotations

import importlib.util
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


def _spd_draws(ndraws: int, n: int, seed: int = 42):
    import numpy as np

    rng = np.random.default_rng(seed)
    a = rng.normal(size=(ndraws, n, n))
    return np.einsum("dij,dkj->dik", a, a) + n * np.eye(n)


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for linear algebra tests")
class MatmulTests(unittest.TestCase):
    def test_identical_draws_give_ordinary_product(self) -> None:
        import numpy as np

        from rvar_jax import RandomVariable, matmul

        a = np.array([[1.0, 2.0], [3.0, 4.0]])
        b = np.array([[5.0], [6.0]])
        x = RandomVariable(np.tile(a, (5, 1, 1)))
        y = RandomVariable(np.tile(b, (5, 1, 1)))
        out = matmul(x, y)
        self.assertEqual(out.shape, (2, 1))
        self.assertEqual(out.ndraws, 5)
        np.testing.assert_allclose(np.asarray(out.data), np.tile(a @ b, (5, 1, 1)))

    def test_each_draw_is_multiplied_independently(self) -> None:
        import numpy as np

        from rvar_jax import RandomVariable

        rng = np.random.default_rng(7)
        xs = rng.normal(size=(10, 2, 3))
        ys = rng.normal(size=(10, 3, 4))
        out = RandomVariable(xs, nchains=2) @ RandomVariable(ys, nchains=2)
        self.assertEqual(out.shape, (2, 4))
        self.assertEqual(out.nchains, 2)
        for i in range(10):
            np.testing.assert_allclose(np.asarray(out.data[i]), xs[i] @ ys[i], rtol=1e-4, atol=1e-5)

    def test_constant_matrix_is_shared_by_all_draws(self) -> None:
        import numpy as np

        from rvar_jax import RandomVariable

        rng = np.random.default_rng(11)
        xs = rng.normal(size=(8, 3, 3))
        out = RandomVariable(xs) @ np.diag([1.0, 2.0, 3.0])
        self.assertEqual(out.ndraws, 8)
        np.testing.assert_allclose(np.asarray(out.data), xs * np.array([1.0, 2.0, 3.0]), rtol=1e-5)

        left = np.eye(3) @ RandomVariable(xs)
        np.testing.assert_allclose(np.asarray(left.data), xs, rtol=1e-6)

    def test_vectors_are_row_on_left_and_column_on_right(self) -> None:
        import numpy as np

        from rvar_jax import RandomVariable, matmul

        x = RandomVariable(np.array([[1.0, 2.0, 3.0], [0.0, 1.0, 0.0]]))
        out = matmul(x, [1.0, 1.0, 1.0])
        self.assertEqual(out.shape, (1, 1))
        np.testing.assert_allclose(np.asarray(out.data[:, 0, 0]), [6.0, 1.0])

        outer = matmul(np.ones((3, 1)), RandomVariable(np.ones((2, 1, 2))))
        self.assertEqual(outer.shape, (3, 2))

    def test_rank_and_inner_dimension_errors(self) -> None:
        import numpy as np

        from rvar_jax import RandomVariable, RVarShapeError, matmul

        with self.assertRaises(RVarShapeError) as cm:
            matmul(RandomVariable(np.zeros((2, 2, 2, 2))), np.eye(2))
        self.assertIn("First argument", str(cm.exception))
        with self.assertRaises(RVarShapeError) as cm:
            matmul(np.eye(2), 3.0)
        self.assertIn("Second argument", str(cm.exception))
        with self.assertRaises(RVarShapeError):
            matmul(RandomVariable(np.zeros((4, 2, 3))), np.zeros((2, 2)))

    def test_mismatched_draws_raise(self) -> None:
        import numpy as np

        from rvar_jax import DrawMismatchError, RandomVariable

        with self.assertRaises(DrawMismatchError):
            RandomVariable(np.zeros((4, 2, 2))) @ RandomVariable(np.zeros((5, 2, 2)))

    def test_labels_come_from_outer_axes(self) -> None:
        import numpy as np

        from rvar_jax import RandomVariable

        x = RandomVariable(np.ones((3, 2, 2))).with_labels(levels=(("a", "b"), ("i", "j")))
        y = RandomVariable(np.ones((3, 2, 1))).with_labels(levels=(("i", "j"), ("c",)))
        out = x @ y
        self.assertEqual(out.labels.level(0), ("a", "b"))
        self.assertEqual(out.labels.level(1), ("c",))


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for linear algebra tests")
class CholeskyTests(unittest.TestCase):
    def test_upper_factor_reconstructs_each_draw(self) -> None:
        import numpy as np

        from rvar_jax import RandomVariable, cholesky, transpose

        sigma = _spd_draws(20, 3)
        x = RandomVariable(sigma, nchains=4)
        r = cholesky(x)
        self.assertEqual(r.shape, (3, 3))
        self.assertEqual(r.nchains, 4)

        rs = np.asarray(r.data)
        np.testing.assert_allclose(np.tril(rs, k=-1), np.zeros_like(rs), atol=1e-6)

        rebuilt = transpose(r) @ r
        np.testing.assert_allclose(np.asarray(rebuilt.data), sigma, rtol=1e-4, atol=1e-3)

    def test_not_positive_definite_draw_raises(self) -> None:
        import numpy as np

        from rvar_jax import RandomVariable, RVarLinAlgError

        sigma = _spd_draws(5, 3)
        sigma[2] = -np.eye(3)
        with self.assertRaises(RVarLinAlgError) as cm:
            RandomVariable(sigma).cholesky()
        self.assertEqual(cm.exception.draws, (2,))
        self.assertIsInstance(cm.exception, np.linalg.LinAlgError)

    def test_requires_square_matrix(self) -> None:
        import numpy as np

        from rvar_jax import RandomVariable, RVarShapeError, cholesky

        with self.assertRaises(RVarShapeError):
            cholesky(RandomVariable(np.ones((4, 3))))
        with self.assertRaises(RVarShapeError):
            cholesky(RandomVariable(np.ones((4, 2, 3))))


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for linear algebra tests")
class TransposeTests(unittest.TestCase):
    def test_vector_becomes_row(self) -> None:
        import numpy as np

        from rvar_jax import RandomVariable

        x = RandomVariable(np.arange(12.0).reshape(4, 3))
        self.assertEqual(x.T.shape, (1, 3))
        np.testing.assert_array_equal(np.asarray(x.T.data[:, 0, :]), np.asarray(x.data))

    def test_matrix_transpose_is_idempotent(self) -> None:
        import numpy as np

        from rvar_jax import RandomVariable, transpose

        data = np.arange(24.0).reshape(4, 2, 3)
        x = RandomVariable(data, nchains=2)
        t = transpose(x)
        self.assertEqual(t.shape, (3, 2))
        np.testing.assert_array_equal(np.asarray(t.data), np.swapaxes(data, 1, 2))
        back = transpose(t)
        self.assertEqual(back.shape, x.shape)
        self.assertEqual(back.nchains, 2)
        np.testing.assert_array_equal(np.asarray(back.data), data)

    def test_transpose_rejects_other_ranks(self) -> None:
        import numpy as np

        from rvar_jax import RandomVariable, RVarShapeError

        with self.assertRaises(RVarShapeError):
            RandomVariable(np.zeros(4)).transpose()
        with self.assertRaises(RVarShapeError):
            RandomVariable(np.zeros((4, 2, 2, 2))).T

    def test_permute_axes_leaves_draws_first(self) -> None:
        import numpy as np

        from rvar_jax import RandomVariable, RVarShapeError, aperm, permute_axes

        data = np.arange(120.0).reshape(5, 2, 3, 4)
        x = RandomVariable(data).with_labels(names=("a", "b", "c"))
        out = permute_axes(x, (2, 0, 1))
        self.assertEqual(out.shape, (4, 2, 3))
        self.assertEqual(out.ndraws, 5)
        self.assertEqual(out.labels.names, ("c", "a", "b"))
        np.testing.assert_array_equal(np.asarray(out.data), np.transpose(data, (0, 3, 1, 2)))
        self.assertEqual(aperm(x, (-1, 0, 1)).shape, (4, 2, 3))

        with self.assertRaises(RVarShapeError):
            permute_axes(x, (0, 1))
        with self.assertRaises(RVarShapeError):
            permute_axes(x, (0, 0, 1))
        with self.assertRaises(RVarShapeError):
            permute_axes(x, (0, 1, 3))

    def test_transpose_carries_labels(self) -> None:
        import numpy as np

        from rvar_jax import RandomVariable

        x = RandomVariable(np.zeros((2, 2, 3))).with_labels(levels=(("r1", "r2"), ("c1", "c2", "c3")))
        self.assertEqual(x.T.labels.level(0), ("c1", "c2", "c3"))
        self.assertEqual(x.T.labels.level(1), ("r1", "r2"))


if __name__ == "__main__":
    unittest.main()
