# dagrad/core/graph.py
from __future__ import annotations
from typing import Dict, List, Optional, Union

import numpy as np

from ..logger import get_logger
from . import vecops
from .errors import ShapeError
from .handle import Handle
from .ids import NodeId
from .node import Node

logger = get_logger(__name__)

NodeLike = Union[Handle, Node]


def _node(x: NodeLike) -> Node:
    return x.node if isinstance(x, Handle) else x


def topological_order(root: NodeLike) -> List[Node]:
    """
    Post-order over everything reachable from `root`: every node appears
    after all of its children, and each distinct NodeId appears once even
    when reached along several paths.

    Iterative, so arbitrarily deep chains do not hit the recursion limit.
    """
    order: List[Node] = []
    visited = set()
    stack = [(_node(root), False)]
    while stack:
        node, expanded = stack.pop()
        if expanded:
            order.append(node)
            continue
        nid = node.id()
        if nid in visited:
            continue
        visited.add(nid)
        stack.append((node, True))
        # Push in reverse so children are expanded left to right
        for child in reversed(node.children()):
            if child.id() not in visited:
                stack.append((child.node, False))
    return order


def _retains(node: Node) -> bool:
    """Constants take part in the sweep but their gradient is never kept."""
    return not (node.is_leaf() and not node.requires_grad())


class Graph:
    """
    Backward context: NodeId -> accumulated gradient of one output.

    Usage:
        g = Graph()
        g.backward(loss)
        g.get_grad(x)      # ndarray, or None when no gradient was recorded

    Each backward() starts from an empty map; nothing carries over from a
    previous pass. A Graph is not meant to be mutated from several threads,
    but separate Graphs may run concurrently over shared nodes.
    """

    def __init__(self):
        self._grads: Dict[NodeId, np.ndarray] = {}

    def backward(self, root: NodeLike, seed: Optional[np.ndarray] = None) -> 'Graph':
        """
        Run one reverse pass from `root`.

        Args:
            root: output node (Handle or Node).
            seed: gradient of the output w.r.t. itself. Defaults to ones of
                  root's length, i.e. the sum of all outputs is differentiated.

        Notes:
            - Nodes are processed in reverse topological order, so a node's
              accumulator holds the sum of all its consumers' contributions
              before its own compute_grad runs.
            - For each child c of node n: grads[c] += local contribution.
        """
        root = _node(root)

        if seed is None:
            seed = vecops.ones(len(root), dtype=root.value().dtype)
        else:
            seed = vecops.as_vector(seed, dtype=root.value().dtype)
            if seed.shape[0] != len(root):
                raise ShapeError(f"seed has length {seed.shape[0]}, root has length {len(root)}")
        self._grads = {}

        order = topological_order(root)
        order.reverse()
        logger.debug("backward: root=%r nodes=%d", root.id(), len(order))

        if _retains(root):
            self._grads[root.id()] = seed
        else:
            # Constant root: nothing reachable, nothing to keep
            return self

        for node in order:
            upstream = self._grads.get(node.id())
            if upstream is None:
                continue
            if node.is_leaf():
                continue

            children = node.children()
            scratch = [vecops.zeros(len(c), dtype=c.value().dtype) for c in children]
            node.compute_grad(upstream, scratch)

            for child, contrib in zip(children, scratch):
                cnode = child.node
                if not _retains(cnode):
                    continue
                cid = cnode.id()
                acc = self._grads.get(cid)
                if acc is None:
                    acc = vecops.zeros(len(cnode), dtype=cnode.value().dtype)
                    self._grads[cid] = acc
                vecops.iadd(acc, contrib)

            logger.debug("backward: %s %r -> %d children", node.op_tag, node.id(), len(children))

        for acc in self._grads.values():
            acc.setflags(write=False)
        return self

    def get_grad(self, node: NodeLike) -> Optional[np.ndarray]:
        """Accumulated gradient for `node` (read-only), or None if none was recorded."""
        return self._grads.get(_node(node).id())

    def gradients(self) -> Dict[NodeId, np.ndarray]:
        return dict(self._grads)

    def __contains__(self, node: NodeLike) -> bool:
        return _node(node).id() in self._grads

    def __len__(self):
        return len(self._grads)


def backward(root: NodeLike, seed: Optional[np.ndarray] = None) -> Graph:
    """Shorthand: run one pass in a fresh Graph and return it."""
    return Graph().backward(root, seed=seed)
