"""
Deduplicating store of layers, keyed by bare digest.
"""

import threading
from typing import Dict, Iterator, List, Optional

from .models import LayerNode
from .utils import normalize_digest


class LayerRegistry:
    """Keeps exactly one LayerNode per digest for the lifetime of a scan."""

    def __init__(self) -> None:
        self._layers: Dict[str, LayerNode] = {}
        self._lock = threading.Lock()
        # Held for a whole chain walk so parallel builds see finished chains
        self.walk_lock = threading.RLock()

    def resolve(self, digest: str, container_name: Optional[str] = None) -> LayerNode:
        """
        Return the node for `digest`, creating it on first use.

        Every call counts as one more reference. `container_name` is recorded
        when a container references the layer as its own parent layer.
        """
        key = normalize_digest(digest)
        with self._lock:
            node = self._layers.get(key)
            if node is None:
                node = LayerNode(digest=key)
                self._layers[key] = node
            node.reference_count += 1
            if container_name:
                node.containers.append(container_name)
            return node

    def release(self, node: LayerNode, container_name: Optional[str] = None) -> None:
        """Undo one `resolve` call that returned `node`."""
        with self._lock:
            node.reference_count -= 1
            if container_name and container_name in node.containers:
                # drop the most recent entry
                index = len(node.containers) - 1 - node.containers[::-1].index(container_name)
                del node.containers[index]
            if node.reference_count <= 0 and self._layers.get(node.digest) is node:
                del self._layers[node.digest]

    def get(self, digest: str) -> Optional[LayerNode]:
        return self._layers.get(normalize_digest(digest))

    def nodes(self) -> List[LayerNode]:
        with self._lock:
            return list(self._layers.values())

    def __contains__(self, digest: str) -> bool:
        return self.get(digest) is not None

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[LayerNode]:
        return iter(self.nodes())
