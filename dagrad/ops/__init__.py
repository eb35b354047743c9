# dagrad/ops/__init__.py

# Importing the submodules binds the operator sugar onto Handle
from . import arithmetic
from . import transcendental
from . import reduction

from .leaves import Variable, Constant, variable, constant, as_handle
from .arithmetic import Add, Subtract, Multiply, Divide, Power, Negate
from .arithmetic import add, sub, mul, div, neg, pow
from .transcendental import Cos, Sin, Ln, Exp
from .transcendental import cos, sin, log, exp
from .reduction import SumVec, BulkSum, sum_vec, bulk_sum, dot

__all__ = [
    "Variable", "Constant", "variable", "constant", "as_handle",
    "Add", "Subtract", "Multiply", "Divide", "Power", "Negate",
    "Cos", "Sin", "Ln", "Exp", "SumVec", "BulkSum",
    "add", "sub", "mul", "div", "neg", "pow",
    "cos", "sin", "log", "exp",
    "sum_vec", "bulk_sum", "dot",
]
