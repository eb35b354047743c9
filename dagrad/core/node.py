# dagrad/core/node.py
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple, TYPE_CHECKING

import numpy as np

from .errors import ArityError
from .ids import IdAllocator, NodeId, default_allocator
from .vecops import as_vector, check_same_length

if TYPE_CHECKING:
    from .handle import Handle


class Node(ABC):
    """
    One vertex of the computation DAG.

    Attributes
    ----------
    op_tag : str
        Debug tag (e.g., "add", "mul"), used in logs and graph summaries.

    Every node owns
      - a NodeId, allocated once at construction,
      - a cached forward value: 1-D float array, flagged read-only,
      - an ordered tuple of child handles (empty for leaves).

    Subclasses implement `compute_grad(upstream, out_buffers)`, which
    OVERWRITES out_buffers[i] with the chain-rule contribution for child i.
    Summing contributions over several consumers is the engine's job.
    """

    op_tag: str = "node"

    def __init__(self, value: np.ndarray, children: Sequence['Handle'] = (),
                 allocator: Optional[IdAllocator] = None):
        self._id = (allocator or default_allocator).next_id()
        value.setflags(write=False)
        self._value = value
        self._children: Tuple['Handle', ...] = tuple(children)

    def id(self) -> NodeId:
        return self._id

    def value(self) -> np.ndarray:
        return self._value

    def children(self) -> Tuple['Handle', ...]:
        return self._children

    @abstractmethod
    def is_leaf(self) -> bool: ...

    def requires_grad(self) -> bool:
        return False

    @abstractmethod
    def compute_grad(self, upstream: np.ndarray, out_buffers: List[np.ndarray]) -> None: ...

    def __len__(self):
        return self._value.shape[0]

    def __repr__(self):
        return f"{type(self).__name__}({self._id!r}, {self._value.tolist()!r})"

    @classmethod
    def new(cls, *args, **kwargs) -> 'Handle':
        """Build a node of this type and return a shared handle to it."""
        from .handle import Handle
        return Handle(cls(*args, **kwargs))


class Leaf(Node):
    """A source node holding a caller-supplied value; it has no children."""

    def __init__(self, values, *, allocator: Optional[IdAllocator] = None):
        super().__init__(as_vector(values), (), allocator)

    def is_leaf(self) -> bool:
        return True

    def compute_grad(self, upstream, out_buffers):
        # Nothing downstream to propagate to
        pass


class Composite(Node):
    """
    An operator node. The forward value is computed eagerly in __init__ from
    the children's cached values.

    Subclasses set `arity` (None = any number >= 1) and implement
    `forward(*values)` and `compute_grad(upstream, out_buffers)`.
    The default `validate(*values)` requires all children to have equal
    length; override it for other contracts.
    """

    arity: Optional[int] = None

    def __init__(self, *children: 'Handle', allocator: Optional[IdAllocator] = None):
        from .handle import Handle

        if self.arity is not None and len(children) != self.arity:
            raise ArityError(f"{self.op_tag} takes {self.arity} children, got {len(children)}")
        if not children:
            raise ArityError(f"{self.op_tag} needs at least one child")
        for c in children:
            if not isinstance(c, Handle):
                raise TypeError(f"{self.op_tag} children must be Handles, got {type(c)}")

        values = [c.value() for c in children]
        self.validate(*values)
        super().__init__(self.forward(*values), children, allocator)

    def is_leaf(self) -> bool:
        return False

    def validate(self, *values: np.ndarray) -> None:
        first = values[0]
        for v in values[1:]:
            check_same_length(first, v, f"{self.op_tag} operands")

    @abstractmethod
    def forward(self, *values: np.ndarray) -> np.ndarray: ...

    def child_values(self) -> List[np.ndarray]:
        return [c.value() for c in self._children]
