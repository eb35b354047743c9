# dagrad/ops/transcendental.py
import numpy as np

from ..core import vecops
from ..core.handle import Handle
from ..core.node import Composite
from .leaves import as_handle


class Cos(Composite):
    op_tag = "cos"
    arity = 1

    def forward(self, x):
        return np.cos(x)

    def compute_grad(self, upstream, out_buffers):
        (x,) = self.child_values()
        g = out_buffers[0]
        np.sin(x, out=g)
        np.negative(g, out=g)
        vecops.imul(g, upstream)


class Sin(Composite):
    op_tag = "sin"
    arity = 1

    def forward(self, x):
        return np.sin(x)

    def compute_grad(self, upstream, out_buffers):
        (x,) = self.child_values()
        g = out_buffers[0]
        np.cos(x, out=g)
        vecops.imul(g, upstream)


class Ln(Composite):
    """Natural log. Non-positive inputs give -inf/NaN, not an error."""
    op_tag = "log"
    arity = 1

    def forward(self, x):
        with np.errstate(all="ignore"):
            return np.log(x)

    def compute_grad(self, upstream, out_buffers):
        (x,) = self.child_values()
        vecops.div(upstream, x, out=out_buffers[0])


class Exp(Composite):
    op_tag = "exp"
    arity = 1

    def forward(self, x):
        with np.errstate(all="ignore"):
            return np.exp(x)

    def compute_grad(self, upstream, out_buffers):
        # d(e^x)/dx = e^x, which is this node's own value
        vecops.mul(self.value(), upstream, out=out_buffers[0])


def cos(x): return Cos.new(as_handle(x))
def sin(x): return Sin.new(as_handle(x))
def log(x): return Ln.new(as_handle(x))
def exp(x): return Exp.new(as_handle(x))


Handle.cos = lambda self: cos(self)
Handle.sin = lambda self: sin(self)
Handle.ln  = lambda self: log(self)
Handle.exp = lambda self: exp(self)
