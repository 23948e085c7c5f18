"""
Finds diff folders no known container depends on.
"""

import os
from typing import Iterable, List, Set

from .errors import LayerRecordError
from .layer_lookup import StorageDriver
from .models import ContainerRecord


def list_diff_folders(driver: StorageDriver, docker_root: str) -> List[str]:
    """List the layer folders the driver currently keeps on disk."""
    diff_root = driver.diff_root_path(docker_root)
    try:
        entries = os.listdir(diff_root)
    except OSError as e:
        raise LayerRecordError(f"Cannot list diff folders in {diff_root}: {e.strerror or e}") from e
    return sorted(driver.filter_diff_folders(entries))


def reachable_folders(containers: Iterable[ContainerRecord]) -> Set[str]:
    """Every diff folder reachable from the given containers."""
    reachable: Set[str] = set()
    for container in containers:
        reachable.update(container.storage_ids())
    return reachable


def find_orphans(containers: Iterable[ContainerRecord], disk_folders: Iterable[str]) -> List[str]:
    """Return the on-disk folders that no container references, sorted."""
    reachable = reachable_folders(containers)
    return sorted({folder for folder in disk_folders if folder not in reachable})
