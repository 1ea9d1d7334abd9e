"""
Errors raised by vsphere_uuids.

Remote faults (``vmodl.MethodFault`` and its subclasses) are not wrapped,
they propagate to the caller as pyVmomi raises them.
"""


class VsphereUuidsError(Exception):
    """Base class for all errors raised by this package."""


class ConfigError(VsphereUuidsError):
    """The vc_info.ini file is missing a setting or holds a bad value."""


class ConnectionFailure(VsphereUuidsError):
    """Login to the vCenter / ESXi endpoint failed."""


class InvalidPropertyError(VsphereUuidsError):
    """
    A requested property path does not exist on the target type.
    """

    def __init__(self, properties, fault=None):
        self.properties = list(properties)
        self.fault = fault
        super().__init__(
            "One of the properties requested was not present on the object "
            "found. Here is a list of properties which might be wrong: "
            + " ".join(self.properties))


class PropertyTypeError(VsphereUuidsError, TypeError):
    """A property value is not of the kind the caller asked for."""

    def __init__(self, path, expected, value):
        self.path = path
        self.expected = expected
        self.value = value
        super().__init__("Property %s: expected %s, got %s"
                         % (path, expected, type(value).__name__))


class TaskFailure(VsphereUuidsError):
    """A watched task finished in the error state."""

    def __init__(self, message, fault=None):
        self.fault = fault
        super().__init__(message)


class WaitCancelled(VsphereUuidsError):
    """A wait for property updates was cancelled by the caller."""
