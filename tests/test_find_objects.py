import pytest
from pyVmomi import vim, vmodl

from conftest import make_object_content, make_retrieve_result
from vsphere_uuids.exceptions import InvalidPropertyError
from vsphere_uuids.find_objects import (find_all_objects, find_object_by_ref,
                                        get_related, resolve_object_by_name)


def vm_content(moid, name, uuid=None):
    props = {"name": name}
    if uuid is not None:
        props["summary__config__instanceUuid"] = uuid
    return make_object_content(vim.VirtualMachine(moid), **props)


def retrieved_filter_spec(session):
    return session.property_collector.RetrievePropertiesEx.call_args[0][0][0]


def test_resolve_by_name(session, container_view, view_stub):
    session.property_collector.RetrievePropertiesEx.return_value = make_retrieve_result(
        vm_content("vm-41", "db-01", "uuid-41"),
        vm_content("vm-42", "web-01", "uuid-42"))

    bag = resolve_object_by_name(session, vim.VirtualMachine, "web-01",
                                 ["summary.config.instanceUuid"])

    assert bag.moref_string() == "VirtualMachine-vm-42"
    assert bag.get_string("summary.config.instanceUuid") == "uuid-42"

    session.view_manager.CreateContainerView.assert_called_once_with(
        session.root_folder, [vim.VirtualMachine], True)
    spec = retrieved_filter_spec(session)
    assert spec.objectSet[0].obj is container_view
    assert spec.objectSet[0].skip
    traversal = spec.objectSet[0].selectSet[0]
    assert traversal.name == "traverseEntities"
    assert traversal.path == "view"
    assert list(spec.propSet[0].pathSet) == ["summary.config.instanceUuid", "name"]

    # container view destroyed
    view_stub.InvokeMethod.assert_called_once()
    assert view_stub.InvokeMethod.call_args[0][0] is container_view


def test_resolve_by_type_name_does_not_duplicate_name(session, container_view):
    session.property_collector.RetrievePropertiesEx.return_value = make_retrieve_result(
        vm_content("vm-42", "web-01"))

    bag = resolve_object_by_name(session, "VirtualMachine", "web-01", ["Name"])

    assert bag is not None
    assert list(retrieved_filter_spec(session).propSet[0].pathSet) == ["Name"]


def test_resolve_missing_vm_returns_none(session, container_view, view_stub):
    session.property_collector.RetrievePropertiesEx.return_value = make_retrieve_result(
        vm_content("vm-42", "web-01"))

    assert resolve_object_by_name(session, vim.VirtualMachine, "vm-does-not-exist") is None
    view_stub.InvokeMethod.assert_called_once()


def test_empty_inventory(session, container_view):
    session.property_collector.RetrievePropertiesEx.return_value = None

    assert find_all_objects(session, vim.VirtualMachine, ["name"]) == []


def test_follows_continuation_token(session, container_view):
    collector = session.property_collector
    collector.RetrievePropertiesEx.return_value = make_retrieve_result(
        vm_content("vm-1", "a"), token="page-2")
    collector.ContinueRetrievePropertiesEx.return_value = make_retrieve_result(
        vm_content("vm-2", "b"))

    bags = find_all_objects(session, vim.VirtualMachine, ["name"])

    assert [b["name"] for b in bags] == ["a", "b"]
    collector.ContinueRetrievePropertiesEx.assert_called_once_with("page-2")
    assert resolve_object_by_name(session, vim.VirtualMachine, "b").moref_string() \
        == "VirtualMachine-vm-2"


def test_invalid_property_lists_requested_properties(session, container_view, view_stub):
    session.property_collector.RetrievePropertiesEx.side_effect = \
        vmodl.query.InvalidProperty(name="summary.bogus")

    with pytest.raises(InvalidPropertyError) as excinfo:
        resolve_object_by_name(session, vim.VirtualMachine, "web-01", ["summary.bogus"])

    assert excinfo.value.properties == ["summary.bogus", "name"]
    assert "summary.bogus" in str(excinfo.value)
    view_stub.InvokeMethod.assert_called_once()


def test_find_object_by_ref(session):
    vm = vim.VirtualMachine("vm-42")
    session.property_collector.RetrievePropertiesEx.return_value = make_retrieve_result(
        make_object_content(vm, summary__config__uuid="4207aa"))

    bag = find_object_by_ref(session, vm, ["summary.config.uuid"])

    assert bag.get_string("summary.config.uuid") == "4207aa"
    spec = retrieved_filter_spec(session)
    assert spec.objectSet[0].obj is vm
    assert spec.propSet[0].type is vim.VirtualMachine


def test_get_related(session):
    vm = vim.VirtualMachine("vm-42")
    session.property_collector.RetrievePropertiesEx.return_value = make_retrieve_result(
        make_object_content(vm, runtime__host=vim.HostSystem("host-7")))

    host = get_related(session, vm, "runtime.host")

    assert isinstance(host, vim.HostSystem)
    assert host._moId == "host-7"


def test_get_related_missing(session):
    vm = vim.VirtualMachine("vm-42")
    session.property_collector.RetrievePropertiesEx.return_value = make_retrieve_result(
        make_object_content(vm))

    assert get_related(session, vm, "runtime.host") is None
