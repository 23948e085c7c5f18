"""
Builds the chain of shared layers a container sits on.
"""

import logging
import os
from typing import List, Optional, Set

from .errors import CyclicChain, SizeUnavailable
from .layer_lookup import StorageDriver
from .models import UNKNOWN_SIZE, LayerNode
from .registry import LayerRegistry
from .utils import parse_digest, read_record

logger = logging.getLogger(__name__)

# Docker refuses images with more than 125 layers
DEFAULT_MAX_DEPTH = 256


def read_layer_size(driver: StorageDriver, docker_root: str, digest: str) -> int:
    """Read the byte size Docker recorded for a layer."""
    path = driver.layer_size_path(docker_root, digest)
    try:
        with open(path, 'r') as f:
            contents = f.read().strip()
    except OSError as e:
        raise SizeUnavailable(f"Cannot read size record {path}: {e.strerror or e}") from e
    except UnicodeDecodeError as e:
        raise SizeUnavailable(f"Cannot decode size record {path}: {e}") from e

    if not contents:
        raise SizeUnavailable(f"Size record {path} is empty")
    try:
        return int(contents)
    except ValueError:
        raise SizeUnavailable(f"Size record {path} holds {contents!r}") from None


def read_layer_parent(driver: StorageDriver, docker_root: str, digest: str) -> Optional[str]:
    """Return the parent digest of a layer, or None for a base layer."""
    path = driver.layer_parent_path(docker_root, digest)
    if not os.path.exists(path):
        return None
    return parse_digest(read_record(path))


def init_layer(node: LayerNode, driver: StorageDriver, docker_root: str) -> Optional[str]:
    """
    Read a layer's size, content location and parent pointer.

    Returns the parent digest, or None when the layer is a base layer.
    """
    try:
        node.size = read_layer_size(driver, docker_root, node.digest)
    except SizeUnavailable as e:
        logger.debug(f"Size of layer {node.digest} is unknown: {e}")
        node.size = UNKNOWN_SIZE

    cache_id_path = driver.layer_cache_id_path(docker_root, node.digest)
    if cache_id_path is not None:
        node.cache_id = read_record(cache_id_path)
    node.location = driver.diff_path(docker_root, node.storage_id)

    return read_layer_parent(driver, docker_root, node.digest)


def build_chain(
    start_digest: str,
    driver: StorageDriver,
    registry: LayerRegistry,
    docker_root: str,
    container_name: Optional[str] = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> LayerNode:
    """
    Resolve `start_digest` and every ancestor into the registry.

    Layers already walked by an earlier build are reused as they are, so each
    digest's records are read at most once per registry. Returns the head node.

    A failed walk is rolled back: the nodes it touched are left uninitialized
    and the references it took are released.
    """
    with registry.walk_lock:
        head = registry.resolve(start_digest, container_name)
        resolved: List[LayerNode] = [head]
        walked: List[LayerNode] = []
        try:
            _walk(head, driver, registry, docker_root, max_depth, resolved, walked)
        except Exception:
            for node in walked:
                node.parent = None
                node.initialized = False
            registry.release(head, container_name)
            for node in resolved[1:]:
                registry.release(node)
            raise
    return head


def _walk(head, driver, registry, docker_root, max_depth, resolved, walked):
    node = head
    visited: Set[str] = set()

    while not (node.initialized or node.parent is not None):
        visited.add(node.digest)
        if len(visited) > max_depth:
            raise CyclicChain(
                f"Layer chain from {head.digest} is deeper than {max_depth} layers"
            )

        walked.append(node)
        parent_digest = init_layer(node, driver, docker_root)
        if parent_digest is None:
            node.initialized = True
            break

        if parent_digest in visited:
            raise CyclicChain(
                f"Layer {node.digest} points back to {parent_digest}, "
                f"already part of the chain from {head.digest}"
            )

        # Ancestors are shared anonymously
        node.parent = registry.resolve(parent_digest)
        resolved.append(node.parent)
        node.initialized = True
        logger.debug(f"Layer {node.digest} -> parent {node.parent.digest}")
        node = node.parent
