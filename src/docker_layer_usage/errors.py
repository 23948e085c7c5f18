"""Exceptions raised while inspecting a Docker storage root."""


class LayerUsageError(Exception):
    """Base exception for all layer usage errors."""

    pass


class ContainerNotFound(LayerUsageError):
    """Raised when docker inspect returns no object for a container id."""

    pass


class InspectionError(LayerUsageError):
    """Raised when container metadata cannot be retrieved."""

    pass


class LayerRecordError(LayerUsageError, OSError):
    """Raised when a required record file or folder is missing or unreadable."""

    pass


class MalformedIdentifier(LayerUsageError, ValueError):
    """Raised when a digest is not in the expected "<algorithm>:<hex>" shape."""

    pass


class CyclicChain(LayerUsageError):
    """Raised when a parent chain revisits a digest or grows past the depth limit."""

    pass


class UnsupportedDriver(LayerUsageError):
    """Raised when no path layout exists for the requested storage driver."""

    pass


class SizeUnavailable(LayerUsageError):
    """Raised when a layer size record is missing, empty or not a number."""

    pass


class SizeTimeout(LayerUsageError):
    """Raised when measuring a folder takes longer than allowed."""

    pass
