"""
Node Index Remapper
===================
File-assigned node ids are arbitrary (sparse, unsorted). Output vertices are
dense and zero-based, numbered in the order the nodes appear in the Nodes
block. One ``NodeIndexMap`` lives for exactly one parse.
"""
from __future__ import annotations

from typing import Iterable, TYPE_CHECKING

import numpy as np

from meshpreview.model.errors import DanglingNodeReferenceError, DuplicateNodeIdError

if TYPE_CHECKING:
    import numpy.typing as npt


class NodeIndexMap:
    """
    Grows while the Nodes block is read, then is frozen and only queried.
    A lookup miss is always an error, never an insertion.
    """
    def __init__(self) -> None:
        self._index: dict[int, int] = {}
        self._frozen = False

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, node_id: int) -> bool:
        return node_id in self._index

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(size={len(self)}, frozen={self._frozen})"

    @property
    def frozen(self) -> bool:
        return self._frozen

    def add(self, node_id: int, offset: int | None = None) -> int:
        """Assign the next dense index to ``node_id`` and return it."""
        if self._frozen:
            raise RuntimeError("NodeIndexMap is frozen; nodes can only be added while reading $Nodes.")
        if node_id in self._index:
            raise DuplicateNodeIdError(
                f"Node id {node_id} is declared more than once.", offset=offset, excerpt=str(node_id)
            )
        index = len(self._index)
        self._index[node_id] = index
        return index

    def add_many(self, node_ids: Iterable[int], offset: int | None = None) -> None:
        for node_id in node_ids:
            self.add(node_id, offset=offset)

    def freeze(self) -> None:
        self._frozen = True

    def lookup(self, node_id: int, offset: int | None = None) -> int:
        """Translate a file node id to its output vertex index."""
        try:
            return self._index[node_id]
        except KeyError:
            raise DanglingNodeReferenceError(
                f"Element references node {node_id}, which is not declared in $Nodes.",
                offset=offset,
                excerpt=str(node_id),
            ) from None

    def lookup_many(
        self,
        node_ids: Iterable[int] | npt.NDArray[np.integer],
        offset: int | None = None,
    ) -> npt.NDArray[np.uint32]:
        """Translate a sequence of node ids, preserving order."""
        if isinstance(node_ids, np.ndarray):
            node_ids = node_ids.ravel().tolist()
        return np.array([self.lookup(node_id, offset) for node_id in node_ids], dtype=np.uint32)
