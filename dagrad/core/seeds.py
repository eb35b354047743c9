# dagrad/core/seeds.py

#-----------------------------------------------------------------------------
# One-call helpers: wrap inputs as Variables, evaluate f, plant the seed
# (dy/dy = 1) at the output and read the gradients back from the Graph.
#-----------------------------------------------------------------------------
from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, List, Union

import numpy as np

from .graph import Graph
from .handle import Handle
from . import vecops


def value(x: Any) -> Any:
    """Return the cached value of a Handle; pass through plain numbers unchanged."""
    return x.value() if isinstance(x, Handle) else x


def _ensure_var(v: Any) -> Handle:
    from ..ops.leaves import Variable
    return v if isinstance(v, Handle) else Variable.new(v)


def _ensure_output(y: Any) -> Handle:
    from ..ops.leaves import Constant
    return y if isinstance(y, Handle) else Constant.new(y)


def _grad_or_zeros(graph: Graph, x: Handle) -> np.ndarray:
    # A caller-declared input that f ignores has a genuine zero gradient
    g = graph.get_grad(x)
    if g is None:
        return vecops.zeros(len(x), dtype=x.value().dtype)
    return g


# ----------------------------- single-input grad ----------------------------- #
def grad(f: Callable[[Handle], Handle],
         x0: Union[float, Iterable[float], np.ndarray, Handle]) -> np.ndarray:
    """
    Gradient of y = f(x) at x0, summed over y's elements.
    Runs one reverse pass in a fresh Graph.
    """
    x = _ensure_var(x0)
    y = _ensure_output(f(x))
    graph = Graph().backward(y)
    return _grad_or_zeros(graph, x)


# ----------------------------- multi-input grads ----------------------------- #
def grads(f: Callable[[Dict[str, Handle]], Handle],
          inputs: Dict[str, Any]) -> Dict[str, np.ndarray]:
    """
    Gradient of y = f(vars) w.r.t. ALL inputs (dict form), from ONE reverse pass.

    Parameters
    ----------
    f       : function taking a dict {name: Handle} and returning a Handle
    inputs  : dict {name: numeric}

    Returns
    -------
    dict {name: ndarray}  # gradients in the same key order as `inputs`
    """
    vars_: Dict[str, Handle] = {k: _ensure_var(v) for k, v in inputs.items()}
    y = _ensure_output(f(vars_))
    graph = Graph().backward(y)
    return {k: _grad_or_zeros(graph, vars_[k]) for k in inputs.keys()}


def grads_list(f: Callable[[List[Handle]], Handle],
               x0_list: Iterable[Any]) -> List[np.ndarray]:
    """
    Same as grads(), with inputs and results as lists.

    Example
    -------
    f = lambda xs: xs[0]*xs[0] + 3*xs[1]
    grads_list(f, [2.0, 4.0]) -> [array([4.]), array([3.])]
    """
    xs = [_ensure_var(v) for v in x0_list]
    y = _ensure_output(f(xs))
    graph = Graph().backward(y)
    return [_grad_or_zeros(graph, x) for x in xs]
