# dagrad/core/__init__.py

"""
Core public API: node identity, the node contract, shared handles, the
vector kernel and the backward engine.

Exports:
    NodeId, IdAllocator : identity of graph nodes
    Node, Leaf, Composite : base classes every operator derives from
    Handle        : shared reference to a node; carries the operator sugar
    Graph         : backward context (NodeId -> accumulated gradient)
    backward      : run one pass in a fresh Graph
    topological_order : deduplicated post-order from a root
    grad, grads, grads_list, value : one-call convenience helpers
"""

from .errors import ShapeError, ArityError
from .ids import NodeId, IdAllocator, default_allocator
from .node import Node, Leaf, Composite
from .handle import Handle
from .graph import Graph, backward, topological_order
from .seeds import grad, grads, grads_list, value

__all__ = [
    "ShapeError",
    "ArityError",
    "NodeId",
    "IdAllocator",
    "default_allocator",
    "Node",
    "Leaf",
    "Composite",
    "Handle",
    "Graph",
    "backward",
    "topological_order",
    "grad",
    "grads",
    "grads_list",
    "value",
]
