# dagrad/core/handle.py
from __future__ import annotations
from typing import List, Tuple

import numpy as np

from .ids import NodeId
from .node import Node


class Handle:
    """
    Shared reference to a graph node.

    Any number of parent nodes and caller variables may hold handles to the
    same node; the node lives as long as its longest holder. Copying a handle
    (`alias()`) never copies node data.

    Arithmetic operators (+, -, *, /, **, unary -) and the methods
    exp/ln/sin/cos/pow/sum are bound by `dagrad.ops` and build new nodes
    through the same constructors as the functional API.
    """

    __slots__ = ("node",)
    __array_priority__ = 1000  # ensures NumPy scalars defer to Handle operators
    __array_ufunc__ = None

    def __init__(self, node: Node):
        if not isinstance(node, Node):
            raise TypeError(f"Handle wraps a Node, got {type(node)}")
        self.node = node

    def alias(self) -> 'Handle':
        return Handle(self.node)

    # --- node contract, delegated ---
    def id(self) -> NodeId:
        return self.node.id()

    def value(self) -> np.ndarray:
        return self.node.value()

    def children(self) -> Tuple['Handle', ...]:
        return self.node.children()

    def is_leaf(self) -> bool:
        return self.node.is_leaf()

    def requires_grad(self) -> bool:
        return self.node.requires_grad()

    def compute_grad(self, upstream: np.ndarray, out_buffers: List[np.ndarray]) -> None:
        self.node.compute_grad(upstream, out_buffers)

    @property
    def op_tag(self) -> str:
        return self.node.op_tag

    def __len__(self):
        return len(self.node)

    def __repr__(self):
        return f"Handle({self.node.op_tag}, {self.node.id()!r}, {self.node.value().tolist()!r})"
