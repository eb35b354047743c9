"""
Finite-difference gradient checking.

Compares gradients from the backward engine with central differences of the
sum of f's output.
"""

from typing import Callable, List, Sequence

import numpy as np

from .core.graph import Graph
from .core.handle import Handle
from .core.vecops import as_vector
from .ops.leaves import Variable


def numerical_grad(
    func: Callable[..., Handle],
    inputs: Sequence,
    index: int = 0,
    eps: float = 1e-6,
) -> np.ndarray:
    """
    Central-difference gradient of sum(func(*inputs)) w.r.t. inputs[index].

    Inputs are plain numeric values; each evaluation builds a fresh graph.
    """
    values = [as_vector(v, dtype=np.float64) for v in inputs]
    x = values[index]
    grad = np.zeros_like(x)

    for i in range(x.shape[0]):
        orig = x[i]
        x[i] = orig + eps
        f_plus = func(*[Variable.new(v) for v in values]).value().sum()
        x[i] = orig - eps
        f_minus = func(*[Variable.new(v) for v in values]).value().sum()
        x[i] = orig
        grad[i] = (f_plus - f_minus) / (2 * eps)

    return grad


def check_gradients(
    func: Callable[..., Handle],
    inputs: Sequence,
    eps: float = 1e-6,
    atol: float = 1e-5,
    rtol: float = 1e-4,
) -> bool:
    """
    Verify gradients numerically.

    Parameters
    ----------
    func : Callable
        Function of Handles returning a Handle. Non-scalar outputs are summed.
    inputs : Sequence
        Plain numeric input values
    eps : float
        Finite difference step size
    atol, rtol : float
        Absolute and relative tolerance

    Returns
    -------
    True if gradients match, raises AssertionError otherwise
    """
    handles: List[Handle] = [Variable.new(as_vector(v, dtype=np.float64)) for v in inputs]
    graph = Graph().backward(func(*handles))

    for i, h in enumerate(handles):
        analytical = graph.get_grad(h)
        if analytical is None:
            analytical = np.zeros(len(h))
        numerical = numerical_grad(func, inputs, index=i, eps=eps)
        if not np.allclose(analytical, numerical, atol=atol, rtol=rtol):
            raise AssertionError(
                f"Gradient mismatch for input {i}:\n"
                f"  analytical: {analytical}\n"
                f"  numerical:  {numerical}"
            )
    return True
