"""
Builds per-container disk usage records.
"""

import json
import logging
import subprocess
from typing import Any, Dict, List, Optional

from .chain import build_chain
from .errors import ContainerNotFound, InspectionError
from .layer_lookup import StorageDriver
from .models import ContainerDetails, ContainerRecord
from .registry import LayerRegistry
from .utils import folder_size, parse_digest, read_record

logger = logging.getLogger(__name__)


class DockerInspector:
    """Fetches container metadata with `docker inspect`."""

    def __init__(self, timeout: Optional[float] = 30, docker_binary: str = 'docker') -> None:
        self.timeout = timeout
        self.docker_binary = docker_binary

    def inspect(self, identifier: str) -> List[Dict[str, Any]]:
        command = [self.docker_binary, 'inspect', identifier]
        try:
            result = subprocess.run(
                command, capture_output=True, text=True, timeout=self.timeout
            )
        except FileNotFoundError as e:
            raise InspectionError(f"Cannot run {self.docker_binary}: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise InspectionError(
                f"docker inspect {identifier} timed out after {self.timeout}s"
            ) from e

        # An unknown id prints "[]" on stdout and exits non-zero
        output = result.stdout.strip()
        if not output:
            if result.returncode != 0:
                raise InspectionError(
                    f"docker inspect {identifier} failed: {result.stderr.strip()}"
                )
            return []
        try:
            decoded = json.loads(output)
        except json.JSONDecodeError as e:
            raise InspectionError(f"Cannot decode docker inspect output for {identifier}: {e}") from e
        if not isinstance(decoded, list):
            raise InspectionError(f"Unexpected docker inspect output for {identifier}")
        return decoded


class OfflineInspector:
    """Stands in for docker inspect when the storage root comes from a mounted disk."""

    def inspect(self, identifier: str) -> List[Dict[str, Any]]:
        return [{
            'Id': identifier,
            'Name': identifier,
            'State': {'Status': 'unknown'},
        }]


def get_container_details(inspector, identifier: str) -> ContainerDetails:
    """Return the metadata of a container, failing if docker does not know it."""
    decoded = inspector.inspect(identifier)
    if not decoded:
        raise ContainerNotFound(f"No containers matching hash: {identifier} exist!")
    return ContainerDetails.from_inspect(decoded[0])


def build_container(
    identifier: str,
    driver: StorageDriver,
    registry: LayerRegistry,
    docker_root: str,
    inspector,
    size_timeout: Optional[float] = None,
) -> ContainerRecord:
    """
    Build the usage record of one container.

    Any failure aborts the whole record, nothing partial is returned.
    """
    details = get_container_details(inspector, identifier)
    logger.debug(f"Container {identifier} is {details.name} ({details.status})")

    mount_id = read_record(driver.container_mount_file_path(docker_root, identifier))
    mount_location = driver.diff_path(docker_root, mount_id)
    mount_size = folder_size(mount_location, timeout=size_timeout)

    init_id = read_record(driver.container_init_file_path(docker_root, identifier))
    init_location = driver.diff_path(docker_root, init_id)
    init_size = folder_size(init_location, timeout=size_timeout)

    parent = parse_digest(read_record(driver.container_parent_file_path(docker_root, identifier)))
    record = ContainerRecord(
        identifier=identifier,
        details=details,
        mount_id=mount_id,
        mount_size=mount_size,
        mount_location=mount_location,
        init_id=init_id,
        init_size=init_size,
        init_location=init_location,
    )
    record.parent_chain = build_chain(
        parent, driver, registry, docker_root, container_name=record.display_name
    )
    return record
