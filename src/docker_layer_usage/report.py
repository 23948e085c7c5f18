"""
Text and JSON rendering of a scan report.
"""

import json
from typing import Any, Dict, List

from .core import ScanReport
from .models import ContainerRecord, LayerNode
from .utils import format_size


def _size(size_bytes) -> str:
    if size_bytes is None:
        return "unknown"
    return f"{size_bytes} ({format_size(size_bytes)})"


def render_layer(layer: LayerNode) -> List[str]:
    return [
        f"\tLayer id: {layer.digest}",
        f"\t- location: {layer.location}",
        f"\t- size: {_size(layer.size)}",
        f"\t- shared: {layer.reference_count}",
        f"\t- containers: {', '.join(layer.containers) or '-'}",
    ]


def render_container(container: ContainerRecord) -> List[str]:
    details = container.details
    lines = [
        f"Statistics for container: {container.display_name} ({container.identifier})",
        f"- status: {details.status}, pid: {details.pid}, "
        f"started: {details.started_at or '-'}, restarts: {details.restart_count}",
        f"- {container.layer_count} layers",
        f"- init diff location: {container.init_location}",
        f"- init diff size: {_size(container.init_size)}",
        f"- mount diff location: {container.mount_location}",
        f"- mount diff size: {_size(container.mount_size)}",
        "Layers statistics:",
    ]
    for layer in container.layers():
        lines.extend(render_layer(layer))
    return lines


def render_text(report: ScanReport) -> str:
    lines = []
    for container in report.containers:
        lines.extend(render_container(container))
        lines.append("")

    if report.orphans:
        for folder in report.orphans:
            lines.append(f"Diff {folder} is orphaned!")
    else:
        lines.append("No unused layers detected!")

    if report.skipped:
        lines.append("")
        lines.append(f"Skipped {len(report.skipped)} containers:")
        for identifier, reason in report.skipped.items():
            lines.append(f"- {identifier}: {reason}")

    return "\n".join(lines)


def layer_to_dict(layer: LayerNode) -> Dict[str, Any]:
    return {
        'digest': layer.digest,
        'cache_id': layer.cache_id,
        'location': layer.location,
        'size': layer.size,
        'parent': layer.parent.digest if layer.parent else None,
        'shared_count': layer.reference_count,
        'containers': list(layer.containers),
    }


def container_to_dict(container: ContainerRecord) -> Dict[str, Any]:
    details = container.details
    return {
        'id': container.identifier,
        'name': container.display_name,
        'status': details.status,
        'pid': details.pid,
        'started_at': details.started_at,
        'restart_count': details.restart_count,
        'mount': {
            'id': container.mount_id,
            'location': container.mount_location,
            'size': container.mount_size,
        },
        'init': {
            'id': container.init_id,
            'location': container.init_location,
            'size': container.init_size,
        },
        'layers': [layer.digest for layer in container.layers()],
    }


def report_to_dict(report: ScanReport) -> Dict[str, Any]:
    return {
        'docker_root': report.docker_root,
        'driver': report.driver,
        'containers': [container_to_dict(c) for c in report.containers],
        'layers': {node.digest: layer_to_dict(node) for node in report.registry.nodes()},
        'orphans': list(report.orphans),
        'skipped': dict(report.skipped),
    }


def render_json(report: ScanReport) -> str:
    return json.dumps(report_to_dict(report), indent=2)
