"""Tests for the backward engine."""

import math
import threading

import numpy as np
import pytest

import dagrad as dg
from dagrad.core.graph import topological_order


class TestBackwardRules:
    """Gradients of small closed-form functions."""

    def test_linear(self, graph):
        # f(x) = 2x
        x = dg.Variable.new([0.0])
        graph.backward(dg.Multiply.new(x, dg.Constant.scalar(2.0)))
        np.testing.assert_array_equal(graph.get_grad(x), [2.0])

    @pytest.mark.parametrize("x0", [-3.0, 0.0, 1.5, 100.0])
    def test_linear_any_point(self, graph, x0):
        x = dg.Variable.new([x0])
        graph.backward(dg.Multiply.new(x, dg.Constant.scalar(2.0)))
        np.testing.assert_array_equal(graph.get_grad(x), [2.0])

    def test_additive(self, graph):
        # f(x) = x + 2
        x = dg.Variable.new([0.0])
        graph.backward(dg.Add.new(x, dg.Constant.scalar(2.0)))
        np.testing.assert_array_equal(graph.get_grad(x), [1.0])

    def test_affine(self, graph):
        # f(x) = 2x + 3
        x = dg.Variable.new([0.0])
        x2 = dg.Multiply.new(x, dg.Constant.scalar(2.0))
        graph.backward(dg.Add.new(x2, dg.Constant.scalar(3.0)))
        np.testing.assert_array_equal(graph.get_grad(x), [2.0])

    def test_subtraction_is_asymmetric(self, graph):
        x = dg.Variable.new([1.0])
        y = dg.Variable.new([2.0])
        graph.backward(dg.Subtract.new(x, y))
        np.testing.assert_array_equal(graph.get_grad(x), [1.0])
        np.testing.assert_array_equal(graph.get_grad(y), [-1.0])

    def test_power_rule(self, graph):
        # f(x) = x^2 at x = 1
        x = dg.Variable.new([1.0])
        graph.backward(dg.Power.new(x, dg.Constant.scalar(2.0)))
        np.testing.assert_array_equal(graph.get_grad(x), [2.0])

    def test_sum_of_gradients(self, graph):
        # f(x) = x^2 + 3x at x = 1
        x = dg.Variable.new([1.0])
        x2 = dg.Power.new(x, dg.Constant.scalar(2.0))
        x3 = dg.Multiply.new(x, dg.Constant.scalar(3.0))
        out = dg.Add.new(x2, x3)
        np.testing.assert_array_equal(out.value(), [4.0])

        graph.backward(out)
        np.testing.assert_array_equal(graph.get_grad(x), [5.0])

    def test_chain_rule(self, graph):
        # f(x) = (x + 2)^2 at x = 0
        x = dg.Variable.new([0.0])
        x2 = dg.Add.new(x, dg.Constant.scalar(2.0))
        out = dg.Power.new(x2, dg.Constant.scalar(2.0))
        np.testing.assert_array_equal(out.value(), [4.0])

        graph.backward(out)
        np.testing.assert_allclose(graph.get_grad(x), [4.0])
        np.testing.assert_allclose(graph.get_grad(x2), [4.0])

    def test_neg_exp(self, graph):
        # f(x) = e^-x
        x = dg.Variable.new([0.0, 1.0, 2.0])
        graph.backward(dg.exp(dg.neg(x)))
        np.testing.assert_allclose(graph.get_grad(x), [-1.0, -math.exp(-1.0), -math.exp(-2.0)])

    def test_logistic(self, graph):
        # 1 / (1 + e^-x) at x = 0
        x = dg.Variable.new([0.0])
        denom = dg.add(dg.exp(dg.neg(x)), 1.0)
        out = dg.div(1.0, denom)
        np.testing.assert_allclose(out.value(), [0.5])

        graph.backward(out)
        s = out.value()[0]
        np.testing.assert_allclose(graph.get_grad(x), [s * (1.0 - s)])

    def test_trig_identity(self, graph):
        # sin^2 + cos^2 is constant, so its gradient is zero
        x = dg.Variable.new([0.1, 0.7, 2.0])
        two = dg.Constant.new([2.0, 2.0, 2.0])
        out = dg.add(dg.pow(dg.sin(x), two), dg.pow(dg.cos(x), two))
        np.testing.assert_allclose(out.value(), [1.0, 1.0, 1.0])

        graph.backward(out)
        np.testing.assert_allclose(graph.get_grad(x), [0.0, 0.0, 0.0], atol=1e-12)

    def test_log_exp_roundtrip(self, graph):
        x = dg.Variable.new([0.5, 2.0])
        graph.backward(dg.log(dg.exp(x)))
        np.testing.assert_allclose(graph.get_grad(x), [1.0, 1.0])


class TestSharedNodes:
    """Diamond dependencies accumulate every consumer's contribution."""

    def test_dot(self, graph):
        x = dg.Variable.new([1.0, 2.0, 3.0])
        y = dg.Variable.new([0.0, 2.0, 4.0])
        out = dg.SumVec.new(dg.Multiply.new(x, y))
        np.testing.assert_array_equal(out.value(), [16.0])

        graph.backward(out)
        np.testing.assert_array_equal(graph.get_grad(x), [0.0, 2.0, 4.0])
        np.testing.assert_array_equal(graph.get_grad(y), [1.0, 2.0, 3.0])

    def test_same_child_twice(self, graph):
        # x * x: both operand slots point at one node
        x = dg.Variable.new([3.0, -1.0])
        graph.backward(dg.Multiply.new(x, x))
        np.testing.assert_array_equal(graph.get_grad(x), [6.0, -2.0])

    def test_diamond(self, graph):
        # a = x * y; out = a + a  ->  d/dx = 2y
        x = dg.Variable.new([2.0])
        y = dg.Variable.new([5.0])
        a = dg.Multiply.new(x, y)
        out = dg.Add.new(a, a.alias())
        graph.backward(out)
        np.testing.assert_array_equal(graph.get_grad(a), [2.0])
        np.testing.assert_array_equal(graph.get_grad(x), [10.0])
        np.testing.assert_array_equal(graph.get_grad(y), [4.0])

    def test_shared_intermediate_feeds_different_ops(self, graph):
        # h = x + 1; out = sin(h) * h
        x = dg.Variable.new([0.4])
        h = dg.add(x, 1.0)
        out = dg.mul(dg.sin(h), h)
        graph.backward(out)
        hv = 1.4
        np.testing.assert_allclose(graph.get_grad(x), [math.cos(hv) * hv + math.sin(hv)])

    def test_wide_fan_out(self, graph):
        x = dg.Variable.new([1.0, 2.0])
        graph.backward(dg.bulk_sum([x] * 500))
        np.testing.assert_array_equal(graph.get_grad(x), [500.0, 500.0])


class TestSeeding:
    """Seed handling and trivial roots."""

    def test_vector_root_sums_outputs(self, graph):
        x = dg.Variable.new([1.0, 2.0, 3.0])
        graph.backward(dg.mul(x, x))
        np.testing.assert_array_equal(graph.get_grad(x), [2.0, 4.0, 6.0])

    def test_custom_seed(self, graph):
        x = dg.Variable.new([1.0, 2.0])
        graph.backward(dg.mul(x, x), seed=[1.0, 0.0])
        np.testing.assert_array_equal(graph.get_grad(x), [2.0, 0.0])

    def test_seed_length_mismatch(self, graph):
        x = dg.Variable.new([1.0, 2.0])
        with pytest.raises(dg.ShapeError):
            graph.backward(x, seed=[1.0])

    def test_bad_seed_keeps_previous_pass(self, graph):
        x = dg.Variable.new([1.0, 2.0])
        out = dg.mul(x, 3.0)
        graph.backward(out)
        with pytest.raises(dg.ShapeError):
            graph.backward(out, seed=[1.0])
        np.testing.assert_array_equal(graph.get_grad(x), [3.0, 3.0])

    def test_leaf_root(self, graph):
        x = dg.Variable.new([4.0, 5.0])
        graph.backward(x)
        np.testing.assert_array_equal(graph.get_grad(x), [1.0, 1.0])

    def test_constant_root(self, graph):
        c = dg.Constant.new([1.0])
        graph.backward(c)
        assert graph.get_grad(c) is None
        assert len(graph) == 0

    def test_accepts_bare_node(self, graph):
        x = dg.Variable.new([2.0])
        out = dg.mul(x, 3.0)
        graph.backward(out.node)
        np.testing.assert_array_equal(graph.get_grad(x.node), [3.0])


class TestAbsence:
    """Absent gradients are None, never zeros."""

    def test_before_backward(self, graph):
        x = dg.Variable.new([1.0])
        assert graph.get_grad(x) is None

    def test_constant(self, graph):
        x = dg.Variable.new([1.0])
        c = dg.Constant.new([2.0])
        graph.backward(dg.mul(x, c))
        assert graph.get_grad(c) is None
        assert c not in graph
        assert x in graph

    def test_unreached_node(self, graph):
        x = dg.Variable.new([1.0])
        y = dg.Variable.new([2.0])
        graph.backward(dg.mul(x, x))
        assert graph.get_grad(y) is None

    def test_consumer_above_root(self, graph):
        x = dg.Variable.new([1.0])
        mid = dg.add(x, x)
        top = dg.mul(mid, 2.0)
        graph.backward(mid)
        assert graph.get_grad(top) is None

    def test_zero_gradient_is_not_absent(self, graph):
        x = dg.Variable.new([1.0])
        y = dg.Variable.new([0.0])
        graph.backward(dg.mul(x, y))
        np.testing.assert_array_equal(graph.get_grad(x), [0.0])


class TestReadOnlyResults:
    """Gradients handed out by a Graph cannot be mutated."""

    def test_get_grad_is_read_only(self, graph):
        x = dg.Variable.new([1.0, 2.0])
        out = dg.mul(x, x)
        graph.backward(out)
        with pytest.raises(ValueError):
            graph.get_grad(x)[0] = 100.0
        with pytest.raises(ValueError):
            graph.get_grad(out)[0] = 100.0
        np.testing.assert_array_equal(graph.get_grad(x), [2.0, 4.0])

    def test_gradients_mapping_is_read_only(self, graph):
        x = dg.Variable.new([1.0])
        graph.backward(dg.sin(x))
        for g in graph.gradients().values():
            assert not g.flags.writeable


class TestMixedDtypes:
    """Gradients and sums follow numpy promotion, independent of child order."""

    def test_bulk_sum_promotes_regardless_of_order(self):
        dg.set_config(dtype=np.float32)
        a = dg.Variable.new([1.0, 2.0])
        dg.set_config(dtype=np.float64)
        b = dg.Variable.new([0.5, 0.25])
        assert a.value().dtype == np.float32
        v1 = dg.bulk_sum([a, b]).value()
        v2 = dg.bulk_sum([b, a]).value()
        v3 = dg.add(a, b).value()
        assert v1.dtype == v2.dtype == v3.dtype == np.float64
        np.testing.assert_array_equal(v1, v2)

    def test_gradient_dtype_matches_node(self):
        dg.set_config(dtype=np.float32)
        a = dg.Variable.new([1.0, 2.0])
        dg.set_config(dtype=np.float64)
        b = dg.Variable.new([3.0, 4.0])
        graph = dg.backward(dg.bulk_sum([a, b]))
        assert graph.get_grad(a).dtype == np.float32
        assert graph.get_grad(b).dtype == np.float64

        graph = dg.backward(dg.mul(dg.sum_vec(a), dg.sum_vec(b)))
        assert graph.get_grad(a).dtype == np.float32
        assert graph.get_grad(b).dtype == np.float64
        np.testing.assert_allclose(graph.get_grad(a), [7.0, 7.0])
        np.testing.assert_allclose(graph.get_grad(b), [3.0, 3.0])


class TestPasses:
    """Independence of backward passes."""

    def test_deterministic(self):
        x = dg.Variable.new([0.3, 0.9])
        y = dg.Variable.new([1.1, -0.2])
        out = dg.dot(dg.sin(x), dg.exp(y))
        g1 = dg.backward(out)
        g2 = dg.backward(out)
        np.testing.assert_array_equal(g1.get_grad(x), g2.get_grad(x))
        np.testing.assert_array_equal(g1.get_grad(y), g2.get_grad(y))

    def test_reused_context_does_not_accumulate(self, graph):
        x = dg.Variable.new([2.0])
        out = dg.mul(x, 3.0)
        graph.backward(out)
        first = graph.get_grad(x).copy()
        graph.backward(out)
        np.testing.assert_array_equal(graph.get_grad(x), first)

    def test_reused_context_forgets_previous_root(self, graph):
        x = dg.Variable.new([2.0])
        y = dg.Variable.new([3.0])
        graph.backward(dg.mul(x, 2.0))
        graph.backward(dg.mul(y, 2.0))
        assert graph.get_grad(x) is None
        np.testing.assert_array_equal(graph.get_grad(y), [2.0])

    def test_gradients_mapping(self, graph):
        x = dg.Variable.new([1.0])
        out = dg.mul(x, 2.0)
        graph.backward(out)
        grads = graph.gradients()
        assert set(grads) == {x.id(), out.id()}

    def test_concurrent_independent_contexts(self):
        x = dg.Variable.new([0.5, 1.5])
        out = dg.sum_vec(dg.mul(dg.cos(x), x))
        expected = dg.backward(out).get_grad(x)
        results = []

        def run():
            results.append(dg.backward(out).get_grad(x))

        threads = [threading.Thread(target=run) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(results) == 8
        for r in results:
            np.testing.assert_array_equal(r, expected)


class TestTermination:
    """Deep and heavily shared graphs."""

    def test_deep_chain(self, graph):
        x = dg.Variable.new([1.0])
        out = x
        for _ in range(20000):
            out = dg.add(out, 1.0)
        graph.backward(out)
        np.testing.assert_array_equal(graph.get_grad(x), [1.0])

    def test_doubling_ladder(self, graph):
        # out = 2^n * x built from n shared self-additions
        x = dg.Variable.new([1.0])
        out = x
        for _ in range(40):
            out = dg.add(out, out)
        assert len(topological_order(out)) == 41
        graph.backward(out)
        np.testing.assert_array_equal(graph.get_grad(x), [2.0 ** 40])


class TestTopologicalOrder:
    """Deduplicated post-order."""

    def test_children_before_parents(self):
        x = dg.Variable.new([1.0])
        y = dg.Variable.new([2.0])
        a = dg.mul(x, y)
        b = dg.add(a, x)
        order = topological_order(b)
        pos = {node.id(): i for i, node in enumerate(order)}
        assert len(order) == 4
        assert pos[x.id()] < pos[a.id()] < pos[b.id()]
        assert pos[y.id()] < pos[a.id()]
        assert order[-1] is b.node
