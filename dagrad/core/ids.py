# dagrad/core/ids.py
from __future__ import annotations
import itertools
import threading
from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class NodeId:
    """
    Identity of one graph node.

    Ordered by (namespace, serial): identifiers from the same allocator
    compare in allocation order. Never reused for the life of the process.
    """
    namespace: int
    serial: int

    def __repr__(self):
        return f"NodeId({self.namespace}:{self.serial})"


class IdAllocator:
    """
    Thread-safe source of fresh NodeIds.

    Every allocator gets its own namespace, so ids drawn from two different
    allocators can never collide.
    """

    _namespaces = itertools.count()
    _namespace_lock = threading.Lock()

    def __init__(self):
        with IdAllocator._namespace_lock:
            self.namespace = next(IdAllocator._namespaces)
        self._serials = itertools.count()
        self._lock = threading.Lock()

    def next_id(self) -> NodeId:
        with self._lock:
            serial = next(self._serials)
        return NodeId(self.namespace, serial)

    def __repr__(self):
        return f"IdAllocator(namespace={self.namespace})"


# Shared process-wide allocator used when a constructor is not given one
default_allocator = IdAllocator()
