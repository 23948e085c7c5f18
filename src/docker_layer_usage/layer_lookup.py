"""
Path layouts for the storage drivers Docker can run on.

Each driver maps the same logical records (a container's mount-id, a layer's
size or parent, ...) to concrete files under the Docker root.
"""

import os
from typing import Dict, Iterable, List, Optional, Type

from .errors import UnsupportedDriver


class StorageDriver:
    """Path layout shared by the layerdb based drivers."""

    name = ""
    # Entries in the diff root that are driver bookkeeping, not layers
    bookkeeping_folders = frozenset()

    def layerdb_path(self, docker_root: str) -> str:
        return os.path.join(docker_root, 'image', self.name, 'layerdb')

    def container_folder_path(self, docker_root: str) -> str:
        """Folder holding one entry per container known to the driver."""
        return os.path.join(self.layerdb_path(docker_root), 'mounts')

    def container_mount_file_path(self, docker_root: str, container_id: str) -> str:
        return os.path.join(self.container_folder_path(docker_root), container_id, 'mount-id')

    def container_init_file_path(self, docker_root: str, container_id: str) -> str:
        return os.path.join(self.container_folder_path(docker_root), container_id, 'init-id')

    def container_parent_file_path(self, docker_root: str, container_id: str) -> str:
        return os.path.join(self.container_folder_path(docker_root), container_id, 'parent')

    def layer_path(self, docker_root: str, digest: str) -> str:
        return os.path.join(self.layerdb_path(docker_root), 'sha256', digest)

    def layer_size_path(self, docker_root: str, digest: str) -> str:
        return os.path.join(self.layer_path(docker_root, digest), 'size')

    def layer_parent_path(self, docker_root: str, digest: str) -> str:
        return os.path.join(self.layer_path(docker_root, digest), 'parent')

    def layer_cache_id_path(self, docker_root: str, digest: str) -> Optional[str]:
        """Path of the record naming the layer's content folder, if the driver keeps one."""
        return os.path.join(self.layer_path(docker_root, digest), 'cache-id')

    def diff_root_path(self, docker_root: str) -> str:
        raise NotImplementedError

    def diff_path(self, docker_root: str, folder_id: str) -> str:
        raise NotImplementedError

    def filter_diff_folders(self, folders: Iterable[str]) -> List[str]:
        """Drop entries of the diff root that do not belong to a layer."""
        diffs = []
        for folder in folders:
            folder = folder.strip()
            if folder in ('', '.', '..') or folder in self.bookkeeping_folders:
                continue
            diffs.append(folder)
        return diffs


class AufsDriver(StorageDriver):
    name = 'aufs'

    def diff_root_path(self, docker_root: str) -> str:
        return os.path.join(docker_root, 'aufs', 'diff')

    def diff_path(self, docker_root: str, folder_id: str) -> str:
        return os.path.join(self.diff_root_path(docker_root), folder_id)


class Overlay2Driver(StorageDriver):
    name = 'overlay2'
    # l/ holds the short symlinks used to keep mount options small
    bookkeeping_folders = frozenset({'l'})

    def diff_root_path(self, docker_root: str) -> str:
        return os.path.join(docker_root, 'overlay2')

    def diff_path(self, docker_root: str, folder_id: str) -> str:
        return os.path.join(self.diff_root_path(docker_root), folder_id, 'diff')


class DeviceMapperDriver(StorageDriver):
    name = 'devicemapper'
    bookkeeping_folders = frozenset({'base', 'deviceset-metadata', 'transaction-metadata'})

    def diff_root_path(self, docker_root: str) -> str:
        # One metadata file per thin device
        return os.path.join(docker_root, 'devicemapper', 'metadata')

    def diff_path(self, docker_root: str, folder_id: str) -> str:
        return os.path.join(docker_root, 'devicemapper', 'mnt', folder_id)


DRIVERS: Dict[str, Type[StorageDriver]] = {
    AufsDriver.name: AufsDriver,
    Overlay2Driver.name: Overlay2Driver,
    DeviceMapperDriver.name: DeviceMapperDriver,
}


def get_driver(name: str) -> StorageDriver:
    """Return the path layout for a storage driver name."""
    try:
        return DRIVERS[name]()
    except KeyError:
        supported = ', '.join(sorted(DRIVERS))
        raise UnsupportedDriver(
            f"Supported filesystems: {supported}. "
            f"Provided filesystem {name} is currently not supported!"
        ) from None
