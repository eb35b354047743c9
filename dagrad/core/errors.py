# dagrad/core/errors.py
"""Exceptions raised at graph-construction boundaries."""


class ShapeError(ValueError):
    """Operand lengths violate an operator's contract (e.g. unequal lengths)."""


class ArityError(TypeError):
    """An operator received the wrong number of children."""
