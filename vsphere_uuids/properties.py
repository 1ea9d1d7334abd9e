"""
Property specs and the property bag returned by lookups.

The property collector hands back every value as a ``(name, val)`` pair
(``vmodl.DynamicProperty``). PropertyBag keeps those pairs keyed by
property path and gives typed accessors so a caller asking for a string
gets a PropertyTypeError, not a random attribute error further down.
"""

from pyVmomi import vmodl, VmomiSupport

from vsphere_uuids.exceptions import PropertyTypeError

VIM_NAMESPACE = 'urn:vim25'

PropertySpec = vmodl.query.PropertyCollector.PropertySpec
ObjectSpec = vmodl.query.PropertyCollector.ObjectSpec
FilterSpec = vmodl.query.PropertyCollector.FilterSpec
TraversalSpec = vmodl.query.PropertyCollector.TraversalSpec

_MISSING = object()


def managed_type(obj_type):
    """
    Return the pyVmomi class for ``obj_type``, which may already be a class
    (vim.VirtualMachine) or a WSDL type name ("VirtualMachine").
    """
    if isinstance(obj_type, str):
        return VmomiSupport.GetWsdlType(VIM_NAMESPACE, obj_type)
    return obj_type


def type_name(obj_type):
    """WSDL name of a pyVmomi class, e.g. "VirtualMachine"."""
    if isinstance(obj_type, str):
        return obj_type
    return getattr(obj_type, '_wsdlName', obj_type.__name__)


def create_moref(obj_type, value, stub=None):
    """Manufacture a reference, e.g. create_moref("ServiceInstance", "ServiceInstance")."""
    return managed_type(obj_type)(value, stub)


def moref_string(ref):
    """Format a reference the way the sample prints it: "VirtualMachine-vm-42"."""
    return "%s-%s" % (type_name(type(ref)), ref._moId)


def create_property_spec(obj_type, *paths):
    return PropertySpec(type=managed_type(obj_type), all=False, pathSet=list(paths))


def create_property_filter_spec(obj_ref, paths):
    """Filter spec watching ``paths`` on the single object ``obj_ref``."""
    object_spec = ObjectSpec(obj=obj_ref, skip=False)
    property_spec = PropertySpec(type=type(obj_ref), all=False, pathSet=list(paths))
    return FilterSpec(objectSet=[object_spec], propSet=[property_spec])


class PropertyBag(object):
    """
    Property values fetched for one managed object, keyed by property path.
    """

    def __init__(self, obj, values=None):
        self.obj = obj
        self._values = dict(values or {})

    @classmethod
    def from_object_content(cls, object_content):
        values = {}
        for prop in object_content.propSet or []:
            values[prop.name] = prop.val
        return cls(object_content.obj, values)

    def __contains__(self, path):
        return path in self._values

    def __getitem__(self, path):
        return self._values[path]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __repr__(self):
        return "PropertyBag(%r, %r)" % (self.obj, self._values)

    def moref_string(self):
        return moref_string(self.obj)

    def get(self, path, default=None):
        return self._values.get(path, default)

    def _typed(self, path, kinds, expected, default):
        value = self._values.get(path, _MISSING)
        if value is _MISSING or value is None:
            return default
        if not isinstance(value, kinds):
            raise PropertyTypeError(path, expected, value)
        return value

    def get_string(self, path, default=None):
        return self._typed(path, str, 'a string', default)

    def get_enum(self, path, default=None):
        # pyVmomi enum values are str subclasses (vim.TaskInfo.State.success)
        return self._typed(path, str, 'an enumerated value', default)

    def get_reference(self, path, default=None):
        return self._typed(path, VmomiSupport.ManagedObject, 'a managed object reference', default)

    def get_fault(self, path, default=None):
        return self._typed(path, vmodl.MethodFault, 'a fault', default)

    def get_list(self, path, default=None):
        return self._typed(path, (list, tuple), 'a list', default)
