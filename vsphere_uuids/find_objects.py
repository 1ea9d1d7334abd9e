"""
Inventory lookups through a container view and the property collector.

Lookups that find nothing return None (or an empty list); the caller
decides whether that is an error.
"""

import logging

from pyVmomi import vim, vmodl

from vsphere_uuids.exceptions import InvalidPropertyError
from vsphere_uuids.properties import (FilterSpec, ObjectSpec, PropertyBag,
                                      TraversalSpec, create_property_spec,
                                      managed_type, type_name)

logger = logging.getLogger(__name__)

RetrieveOptions = vmodl.query.PropertyCollector.RetrieveOptions


def _container_filter_spec(container_view, property_spec):
    traversal_spec = TraversalSpec(name='traverseEntities',
                                   path='view',
                                   skip=False,
                                   type=vim.view.ContainerView)
    object_spec = ObjectSpec(obj=container_view, skip=True,
                             selectSet=[traversal_spec])
    return FilterSpec(objectSet=[object_spec], propSet=[property_spec])


def retrieve(session, filter_spec, properties=()):
    """
    Run one RetrievePropertiesEx and follow its continuation tokens.

    Returns a list of PropertyBag.
    """
    collector = session.property_collector
    bags = []
    try:
        result = collector.RetrievePropertiesEx([filter_spec], RetrieveOptions())
        while result is not None:
            for object_content in result.objects or []:
                bags.append(PropertyBag.from_object_content(object_content))
            if not result.token:
                break
            result = collector.ContinueRetrievePropertiesEx(result.token)
    except vmodl.query.InvalidProperty as fault:
        raise InvalidPropertyError(properties, fault) from fault
    return bags


def find_all_objects(session, obj_type, properties=()):
    """
    Every object of ``obj_type`` below the root folder, with ``properties``.
    """
    container_view = session.view_manager.CreateContainerView(
        session.root_folder, [managed_type(obj_type)], True)
    try:
        property_spec = create_property_spec(obj_type, *properties)
        return retrieve(session,
                        _container_filter_spec(container_view, property_spec),
                        properties)
    finally:
        container_view.Destroy()


def resolve_object_by_name(session, obj_type, name, properties=()):
    """
    The first object of ``obj_type`` called ``name``, or None.

    ``name`` is always fetched along with ``properties``.
    """
    properties = list(properties)
    if not any(prop.lower() == 'name' for prop in properties):
        properties.append('name')

    for bag in find_all_objects(session, obj_type, properties):
        if bag.get('name') == name:
            logger.debug("Found %s %s as %s", type_name(obj_type), name, bag.moref_string())
            return bag

    logger.debug("No %s named %s", type_name(obj_type), name)
    return None


def find_object_by_ref(session, obj_ref, properties):
    """Fetch ``properties`` of one known object; None if nothing came back."""
    properties = list(properties)
    object_spec = ObjectSpec(obj=obj_ref, skip=False)
    property_spec = create_property_spec(type(obj_ref), *properties)
    filter_spec = FilterSpec(objectSet=[object_spec], propSet=[property_spec])
    bags = retrieve(session, filter_spec, properties)
    if not bags:
        return None
    return bags[0]


def get_related(session, obj_ref, relationship):
    """
    Follow a reference-valued property, e.g. get_related(session, vm, "runtime.host").
    """
    bag = find_object_by_ref(session, obj_ref, [relationship])
    related = bag.get_reference(relationship) if bag is not None else None
    if related is None:
        logger.info("The %s of the %s %s was not found.",
                    relationship, obj_ref._moId, type_name(type(obj_ref)))
    return related
