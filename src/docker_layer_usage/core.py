#!/usr/bin/env python3
"""
Core functionality for measuring container layer usage on a Docker host.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .container import DockerInspector, OfflineInspector, build_container
from .errors import LayerRecordError, LayerUsageError
from .layer_lookup import StorageDriver, get_driver
from .models import ContainerRecord
from .orphans import find_orphans, list_diff_folders
from .registry import LayerRegistry

logger = logging.getLogger(__name__)


@dataclass
class ScanConfig:
    """Settings for one scan of a Docker storage root."""

    docker_root: str = '/var/lib/docker'
    driver: str = 'aufs'
    workers: int = 1
    inspect_timeout: Optional[float] = 30
    size_timeout: Optional[float] = 300
    offline: bool = False

    def make_inspector(self):
        if self.offline:
            return OfflineInspector()
        return DockerInspector(timeout=self.inspect_timeout)


@dataclass
class ScanReport:
    """Everything a scan found."""

    docker_root: str
    driver: str
    containers: List[ContainerRecord] = field(default_factory=list)
    skipped: Dict[str, str] = field(default_factory=dict)
    orphans: List[str] = field(default_factory=list)
    registry: LayerRegistry = field(default_factory=LayerRegistry)

    @property
    def complete(self) -> bool:
        return not self.skipped


def list_containers(driver: StorageDriver, docker_root: str) -> List[str]:
    """List container ids known to the storage driver."""
    folder = driver.container_folder_path(docker_root)
    try:
        entries = os.listdir(folder)
    except OSError as e:
        raise LayerRecordError(f"Cannot list containers in {folder}: {e.strerror or e}") from e
    return sorted(entries)


def scan_host(config: ScanConfig, inspector=None) -> ScanReport:
    """
    Build a record for every container and find orphaned diff folders.

    Raises UnsupportedDriver or LayerRecordError when the scan cannot start.
    A container that fails to build is logged and left out of the report.
    """
    driver = get_driver(config.driver)
    docker_root = config.docker_root
    inspector = inspector or config.make_inspector()
    report = ScanReport(docker_root=docker_root, driver=driver.name)

    identifiers = list_containers(driver, docker_root)
    logger.info(f"Found {len(identifiers)} containers under {driver.container_folder_path(docker_root)}")

    def _build(identifier):
        try:
            return build_container(
                identifier, driver, report.registry, docker_root, inspector,
                size_timeout=config.size_timeout,
            ), None
        except (LayerUsageError, OSError) as e:
            return None, e

    if config.workers > 1:
        with ThreadPoolExecutor(max_workers=config.workers) as pool:
            results = list(pool.map(_build, identifiers))
    else:
        results = [_build(identifier) for identifier in identifiers]

    for identifier, (record, error) in zip(identifiers, results):
        if error is not None:
            logger.warning(f"Skipping container {identifier}: {error}")
            report.skipped[identifier] = str(error)
            continue
        report.containers.append(record)

    disk_folders = list_diff_folders(driver, docker_root)
    report.orphans = find_orphans(report.containers, disk_folders)
    logger.info(
        f"Built {len(report.containers)} containers, skipped {len(report.skipped)}, "
        f"{len(report.registry)} distinct layers, {len(report.orphans)} orphaned folders"
    )
    return report
