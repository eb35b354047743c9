# dagrad/__init__.py
# Reverse-mode automatic differentiation over DAGs of vector operations

from .core import (
    NodeId,
    IdAllocator,
    Node,
    Handle,
    Graph,
    backward,
    topological_order,
    grad,
    grads,
    grads_list,
    value,
    ShapeError,
    ArityError,
)
from .ops import (
    Variable, Constant, variable, constant,
    Add, Subtract, Multiply, Divide, Power, Negate,
    Cos, Sin, Ln, Exp, SumVec, BulkSum,
    add, sub, mul, div, neg, pow,
    cos, sin, log, exp,
    sum_vec, bulk_sum, dot,
)
from .config import Config, get_config, set_config, reset_config
from .gradcheck import numerical_grad, check_gradients
from . import graph_utils

__version__ = "0.1.0"

__all__ = [
    # Core
    'NodeId',
    'IdAllocator',
    'Node',
    'Handle',
    'ShapeError',
    'ArityError',
    # Engine
    'Graph',
    'backward',
    'topological_order',
    'grad',
    'grads',
    'grads_list',
    'value',
    # Operators
    'Variable', 'Constant', 'variable', 'constant',
    'Add', 'Subtract', 'Multiply', 'Divide', 'Power', 'Negate',
    'Cos', 'Sin', 'Ln', 'Exp', 'SumVec', 'BulkSum',
    'add', 'sub', 'mul', 'div', 'neg', 'pow',
    'cos', 'sin', 'log', 'exp',
    'sum_vec', 'bulk_sum', 'dot',
    # Config / tools
    'Config',
    'get_config',
    'set_config',
    'reset_config',
    'numerical_grad',
    'check_gradients',
    'graph_utils',
]
