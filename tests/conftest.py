"""
Fakes of the property collector side of a vSphere session.

Update sets and object contents are plain namespaces carrying the same
attribute names pyVmomi uses; references are real pyVmomi managed objects.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from pyVmomi import vim


def make_change(name, val=None, op="assign"):
    return SimpleNamespace(name=name, op=op, val=val)


def make_update_set(version, *changes, kind="modify"):
    object_update = SimpleNamespace(kind=kind, changeSet=list(changes))
    return SimpleNamespace(version=version,
                           filterSet=[SimpleNamespace(objectSet=[object_update])])


def make_object_content(obj, **props):
    prop_set = [SimpleNamespace(name=name.replace("__", "."), val=val)
                for name, val in props.items()]
    return SimpleNamespace(obj=obj, propSet=prop_set)


def make_retrieve_result(*object_contents, token=None):
    return SimpleNamespace(objects=list(object_contents), token=token)


@pytest.fixture
def session():
    fake = MagicMock(name="session")
    fake.property_collector = MagicMock(name="propertyCollector")
    fake.view_manager = MagicMock(name="viewManager")
    fake.root_folder = vim.Folder("group-d1")
    return fake


@pytest.fixture
def view_stub():
    return MagicMock(name="stub")


@pytest.fixture
def container_view(session, view_stub):
    view = vim.view.ContainerView("session[52a1]view-1", view_stub)
    session.view_manager.CreateContainerView.return_value = view
    return view


@pytest.fixture
def task():
    return vim.Task("task-123")
