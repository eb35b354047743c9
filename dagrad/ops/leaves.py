# dagrad/ops/leaves.py
from __future__ import annotations
from typing import Optional

import numpy as np

from ..core.handle import Handle
from ..core.ids import IdAllocator
from ..core.node import Leaf, Node


class Variable(Leaf):
    """
    Tracked source: the quantities a caller wants gradients for.

        x = Variable.new([1.0, 2.0])
    """
    op_tag = "var"

    def requires_grad(self) -> bool:
        return True


class Constant(Leaf):
    """Untracked source. The backward engine never keeps its gradient."""
    op_tag = "const"

    @classmethod
    def scalar(cls, value: float, *, allocator: Optional[IdAllocator] = None) -> Handle:
        return cls.new([value], allocator=allocator)


def variable(values, *, allocator: Optional[IdAllocator] = None) -> Handle:
    return Variable.new(values, allocator=allocator)


def constant(values, *, allocator: Optional[IdAllocator] = None) -> Handle:
    return Constant.new(values, allocator=allocator)


def as_handle(x, like: Optional[Handle] = None) -> Handle:
    """
    Ensure x is a Handle; otherwise wrap it as a Constant.

    A bare Python/NumPy scalar next to `like` becomes a constant of
    like's length (so `x + 2` works for any vector x).
    """
    if isinstance(x, Handle):
        return x
    if isinstance(x, Node):
        return Handle(x)
    if like is not None and np.isscalar(x) and not isinstance(x, (bool, str)):
        return Constant.new(np.full(len(like), float(x)))
    return Constant.new(x)
