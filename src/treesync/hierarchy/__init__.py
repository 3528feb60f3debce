"""Known folder paths, their reconciliation, and the derived folder tree."""

from .builder import HierarchyBuilder
from .models import Node, PathRecord
from .reconciler import Reconciler
from .store import PathRecordStore, StoreSnapshot

__all__ = [
    "HierarchyBuilder",
    "Node",
    "PathRecord",
    "PathRecordStore",
    "Reconciler",
    "StoreSnapshot",
]
