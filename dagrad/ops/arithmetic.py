# dagrad/ops/arithmetic.py
import numpy as np

from ..core import vecops
from ..core.handle import Handle
from ..core.node import Composite
from .leaves import as_handle


class Add(Composite):
    op_tag = "add"
    arity = 2

    def forward(self, x, y):
        return vecops.add(x, y)

    def compute_grad(self, upstream, out_buffers):
        # d(x+y)/dx = 1, d(x+y)/dy = 1
        np.copyto(out_buffers[0], upstream)
        np.copyto(out_buffers[1], upstream)


class Subtract(Composite):
    op_tag = "sub"
    arity = 2

    def forward(self, x, y):
        return vecops.sub(x, y)

    def compute_grad(self, upstream, out_buffers):
        # d(x-y)/dx = 1, d(x-y)/dy = -1
        np.copyto(out_buffers[0], upstream)
        np.negative(upstream, out=out_buffers[1])


class Multiply(Composite):
    op_tag = "mul"
    arity = 2

    def forward(self, x, y):
        return vecops.mul(x, y)

    def compute_grad(self, upstream, out_buffers):
        # d(xy)/dx = y, d(xy)/dy = x
        x, y = self.child_values()
        vecops.mul(y, upstream, out=out_buffers[0])
        vecops.mul(x, upstream, out=out_buffers[1])


class Divide(Composite):
    op_tag = "div"
    arity = 2

    def forward(self, x, y):
        return vecops.div(x, y)

    def compute_grad(self, upstream, out_buffers):
        # d(x/y)/dx = 1/y
        # d(x/y)/dy = -x/y^2
        x, y = self.child_values()
        vecops.div(upstream, y, out=out_buffers[0])

        gy = out_buffers[1]
        vecops.mul(upstream, x, out=gy)
        vecops.idiv(gy, vecops.mul(y, y))
        np.negative(gy, out=gy)


class Power(Composite):
    """
    x ** y, elementwise.

    Both partials are always evaluated, including ln(x) for the exponent
    branch: for x <= 0 that branch is NaN/inf even when y is a constant.
    """
    op_tag = "pow"
    arity = 2

    def forward(self, base, exponent):
        with np.errstate(all="ignore"):
            return np.power(base, exponent)

    def compute_grad(self, upstream, out_buffers):
        x, y = self.child_values()
        with np.errstate(all="ignore"):
            # d(x^y)/dx = y * x^(y-1)
            gx = out_buffers[0]
            np.power(x, y - 1, out=gx)
            vecops.imul(gx, y)
            vecops.imul(gx, upstream)

            # d(x^y)/dy = ln(x) * x^y
            gy = out_buffers[1]
            np.log(x, out=gy)
            vecops.imul(gy, self.value())
            vecops.imul(gy, upstream)


class Negate(Composite):
    op_tag = "neg"
    arity = 1

    def forward(self, x):
        return np.negative(x)

    def compute_grad(self, upstream, out_buffers):
        np.negative(upstream, out=out_buffers[0])


def _binary(cls, x, y) -> Handle:
    """Wrap non-Handle operands as constants (scalars take the other side's length)."""
    if isinstance(x, Handle):
        y = as_handle(y, like=x)
    elif isinstance(y, Handle):
        x = as_handle(x, like=y)
    else:
        x, y = as_handle(x), as_handle(y)
    return cls.new(x, y)


def add(x, y): return _binary(Add, x, y)
def sub(x, y): return _binary(Subtract, x, y)
def mul(x, y): return _binary(Multiply, x, y)
def div(x, y): return _binary(Divide, x, y)
def pow(x, y): return _binary(Power, x, y)


def neg(x):
    return Negate.new(as_handle(x))


# Bind Python operators to Handle
Handle.__add__      = lambda self, other: add(self, other)
Handle.__radd__     = lambda self, other: add(other, self)
Handle.__sub__      = lambda self, other: sub(self, other)
Handle.__rsub__     = lambda self, other: sub(other, self)
Handle.__mul__      = lambda self, other: mul(self, other)
Handle.__rmul__     = lambda self, other: mul(other, self)
Handle.__truediv__  = lambda self, other: div(self, other)
Handle.__rtruediv__ = lambda self, other: div(other, self)
Handle.__pow__      = lambda self, other: pow(self, other)
Handle.__rpow__     = lambda self, other: pow(other, self)
Handle.__neg__      = lambda self: neg(self)
Handle.pow          = lambda self, other: pow(self, other)
