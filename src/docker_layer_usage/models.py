"""Data models for layers and containers found in a Docker storage root."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Set

# Sentinel for a layer whose size record could not be read.
UNKNOWN_SIZE = None


@dataclass(eq=False)
class LayerNode:
    """One content-addressed layer, shared by every container that uses it."""

    digest: str
    size: Optional[int] = UNKNOWN_SIZE
    location: Optional[str] = None
    cache_id: Optional[str] = None
    parent: Optional["LayerNode"] = None
    reference_count: int = 0
    containers: List[str] = field(default_factory=list)
    initialized: bool = False

    @property
    def storage_id(self) -> str:
        """Folder name holding this layer's content in the driver directory."""
        return self.cache_id or self.digest

    @property
    def size_known(self) -> bool:
        return self.size is not UNKNOWN_SIZE

    def layers(self) -> Iterator["LayerNode"]:
        """Yield this layer and its ancestors, ending with the base layer."""
        node: Optional[LayerNode] = self
        seen: Set[int] = set()
        while node is not None and id(node) not in seen:
            seen.add(id(node))
            yield node
            node = node.parent

    @property
    def depth(self) -> int:
        return sum(1 for _ in self.layers())

    def __repr__(self) -> str:
        parent = self.parent.digest if self.parent else None
        return (
            f"LayerNode(digest={self.digest!r}, size={self.size!r}, "
            f"parent={parent!r}, reference_count={self.reference_count})"
        )


@dataclass
class ContainerDetails:
    """Container metadata as reported by docker inspect."""

    name: str
    status: str = "unknown"
    pid: int = 0
    started_at: str = ""
    restart_count: int = 0

    @classmethod
    def from_inspect(cls, data: Dict[str, Any]) -> "ContainerDetails":
        """Build details from a single docker inspect JSON object."""
        state = data.get("State") or {}
        return cls(
            name=(data.get("Name") or "").lstrip("/"),
            status=state.get("Status", "unknown"),
            pid=state.get("Pid", 0) or 0,
            started_at=state.get("StartedAt", "") or "",
            restart_count=data.get("RestartCount", 0) or 0,
        )


@dataclass
class ContainerRecord:
    """Disk usage of a single container: private diffs plus its layer chain."""

    identifier: str
    details: ContainerDetails
    mount_id: str
    mount_size: int
    mount_location: str
    init_id: str
    init_size: int
    init_location: str
    parent_chain: Optional[LayerNode] = None

    @property
    def display_name(self) -> str:
        return self.details.name or self.identifier[:12]

    def layers(self) -> Iterator[LayerNode]:
        if self.parent_chain is not None:
            yield from self.parent_chain.layers()

    @property
    def layer_count(self) -> int:
        return sum(1 for _ in self.layers())

    @property
    def private_size(self) -> int:
        """Bytes used by the container's own mount and init diffs."""
        return self.mount_size + self.init_size

    def storage_ids(self) -> Set[str]:
        """Diff folder names this container keeps alive."""
        ids = {self.mount_id, self.init_id}
        ids.update(layer.storage_id for layer in self.layers())
        return ids
