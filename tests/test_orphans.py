import os

import pytest

from docker_layer_usage.errors import LayerRecordError
from docker_layer_usage.layer_lookup import get_driver
from docker_layer_usage.models import ContainerDetails, ContainerRecord, LayerNode
from docker_layer_usage.orphans import find_orphans, list_diff_folders, reachable_folders


def make_record(mount_id, init_id, chain=None):
    return ContainerRecord(
        identifier=mount_id,
        details=ContainerDetails(name=mount_id),
        mount_id=mount_id,
        mount_size=0,
        mount_location="",
        init_id=init_id,
        init_size=0,
        init_location="",
        parent_chain=chain,
    )


def test_find_orphans():
    record = make_record("F1", "F2")
    assert find_orphans([record], ["F1", "F2", "F3"]) == ["F3"]


def test_reachable_folders_walk_the_whole_chain():
    base = LayerNode(digest="base123", cache_id="cache-base")
    top = LayerNode(digest="top789", cache_id="cache-top", parent=base)
    records = [make_record("m1", "m1-init", top), make_record("m2", "m2-init", base)]

    assert reachable_folders(records) == {"m1", "m1-init", "m2", "m2-init", "cache-top", "cache-base"}
    assert find_orphans(records, ["cache-base", "cache-top", "orphan456", "m2"]) == ["orphan456"]


def test_layer_without_cache_id_uses_digest():
    layer = LayerNode(digest="base123")
    assert find_orphans([make_record("m", "i", layer)], ["base123", "other"]) == ["other"]


def test_no_containers_means_everything_is_orphaned():
    assert find_orphans([], ["b", "a"]) == ["a", "b"]


def test_list_diff_folders_skips_bookkeeping(tmp_path):
    overlay = tmp_path / "overlay2"
    for name in ["l", "abc", "def", "abc-init"]:
        (overlay / name).mkdir(parents=True)

    assert list_diff_folders(get_driver("overlay2"), str(tmp_path)) == ["abc", "abc-init", "def"]


def test_devicemapper_filter():
    driver = get_driver("devicemapper")
    folders = ["base", "deviceset-metadata", "transaction-metadata", "abc", ""]
    assert driver.filter_diff_folders(folders) == ["abc"]
    assert driver.diff_root_path("/var/lib/docker") == os.path.join(
        "/var/lib/docker", "devicemapper", "metadata"
    )


def test_list_diff_folders_missing_root(tmp_path):
    with pytest.raises(LayerRecordError):
        list_diff_folders(get_driver("aufs"), str(tmp_path))
