"""Test configuration and fixtures."""

import pytest

from docker_layer_usage.layer_lookup import get_driver
from docker_layer_usage.registry import LayerRegistry


class FakeDockerRoot:
    """Writes a minimal Docker storage layout under a temporary directory."""

    def __init__(self, root, driver_name='overlay2'):
        self.root = root
        self.driver = get_driver(driver_name)

    @property
    def path(self):
        return str(self.root)

    def _write(self, path, contents):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(contents)

    def _diff_dir(self, folder_id):
        diff = self.root.joinpath(self.driver.diff_path('', folder_id).lstrip('/'))
        diff.mkdir(parents=True, exist_ok=True)
        return diff

    def add_layer(self, digest, size="1024", parent=None, cache_id=None, content=b""):
        """Create a layerdb entry and its diff folder. `parent` is written verbatim."""
        layer_dir = self.root / 'image' / self.driver.name / 'layerdb' / 'sha256' / digest
        layer_dir.mkdir(parents=True, exist_ok=True)
        if size is not None:
            self._write(layer_dir / 'size', size)
        cache_id = cache_id or f"cache-{digest}"
        self._write(layer_dir / 'cache-id', cache_id)
        if parent is not None:
            self._write(layer_dir / 'parent', parent)
        diff = self._diff_dir(cache_id)
        if content:
            (diff / 'data.bin').write_bytes(content)
        return cache_id

    def add_container(self, container_id, parent, mount_content=b"", init_content=b""):
        """Create a container mount entry with mount and init diffs."""
        mount_dir = self.root / 'image' / self.driver.name / 'layerdb' / 'mounts' / container_id
        mount_id = f"mount-{container_id}"
        init_id = f"{mount_id}-init"
        self._write(mount_dir / 'mount-id', mount_id)
        self._write(mount_dir / 'init-id', init_id)
        self._write(mount_dir / 'parent', parent)
        (self._diff_dir(mount_id) / 'written.txt').write_bytes(mount_content)
        (self._diff_dir(init_id) / 'hosts').write_bytes(init_content)
        return mount_id, init_id

    def add_diff_folder(self, folder_id):
        self._diff_dir(folder_id)


class FakeInspector:
    """Answers docker inspect from a fixed id -> name table."""

    def __init__(self, names=None):
        self.names = names or {}
        self.calls = []

    def inspect(self, identifier):
        self.calls.append(identifier)
        if identifier not in self.names:
            return []
        return [{
            'Id': identifier,
            'Name': '/' + self.names[identifier],
            'RestartCount': 0,
            'State': {'Status': 'running', 'Pid': 4242, 'StartedAt': '2024-01-01T00:00:00Z'},
        }]


@pytest.fixture
def docker_root(tmp_path):
    """Empty overlay2 storage root."""
    root = FakeDockerRoot(tmp_path / 'docker')
    (root.root / 'image' / 'overlay2' / 'layerdb' / 'mounts').mkdir(parents=True)
    (root.root / 'overlay2' / 'l').mkdir(parents=True)
    return root


@pytest.fixture
def registry():
    return LayerRegistry()


@pytest.fixture
def fake_inspector():
    """Factory for inspectors that know a given id -> name table."""
    return FakeInspector


@pytest.fixture
def devicemapper_root(tmp_path):
    """Empty devicemapper storage root with the pool bookkeeping files."""
    root = FakeDockerRoot(tmp_path / 'docker', 'devicemapper')
    (root.root / 'image' / 'devicemapper' / 'layerdb' / 'mounts').mkdir(parents=True)
    metadata = root.root / 'devicemapper' / 'metadata'
    metadata.mkdir(parents=True)
    for name in ('base', 'deviceset-metadata', 'transaction-metadata'):
        (metadata / name).write_text('{}')
    return root
