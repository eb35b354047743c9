# dagrad/ops/reduction.py
from typing import Iterable

import numpy as np

from ..core import vecops
from ..core.errors import ArityError
from ..core.handle import Handle
from ..core.node import Composite
from .arithmetic import mul
from .leaves import as_handle


class SumVec(Composite):
    """Reduce one vector to a length-1 vector holding its sum."""
    op_tag = "sum"
    arity = 1

    def forward(self, x):
        return np.array([x.sum()], dtype=x.dtype)

    def compute_grad(self, upstream, out_buffers):
        # d(sum x)/dx_i = 1 for every i
        out_buffers[0].fill(upstream[0])


class BulkSum(Composite):
    """Elementwise sum of N >= 1 equal-length children."""
    op_tag = "bulk_sum"
    arity = None

    def forward(self, *xs):
        agg = vecops.zeros(xs[0].shape[0], dtype=np.result_type(*xs))
        for x in xs:
            vecops.iadd(agg, x)
        return agg

    def compute_grad(self, upstream, out_buffers):
        for out in out_buffers:
            np.copyto(out, upstream)


def sum_vec(x) -> Handle:
    return SumVec.new(as_handle(x))


def bulk_sum(xs: Iterable) -> Handle:
    children = [as_handle(x) for x in xs]
    if not children:
        raise ArityError("bulk_sum needs at least one child")
    return BulkSum.new(*children)


def dot(x, y) -> Handle:
    """Inner product: sum_vec(x * y)."""
    return sum_vec(mul(x, y))


Handle.sum = lambda self: sum_vec(self)
