"""
Session handling for the vSphere Web Services endpoint.

A Session is passed explicitly to every call that talks to the server and
logs out when its ``with`` block ends::

    with connect(server, user, password) as session:
        ...
"""

import logging

from pyVim.connect import SmartConnect, Disconnect
from pyVmomi import vim

from vsphere_uuids.exceptions import ConnectionFailure
from vsphere_uuids.properties import create_moref
from vsphere_uuids.trust import trust_all_certificates

logger = logging.getLogger(__name__)

SERVICE_INSTANCE = 'ServiceInstance'


def service_instance_ref(stub=None):
    """The well-known ServiceInstance reference every session starts from."""
    return create_moref(SERVICE_INSTANCE, SERVICE_INSTANCE, stub)


class Session(object):
    """
    An authenticated connection: the ServiceInstance and its ServiceContent.
    """

    def __init__(self, service_instance, server=None):
        self.service_instance = service_instance
        self.server = server
        self.content = service_instance.RetrieveContent()
        self.connected = True

    @property
    def property_collector(self):
        return self.content.propertyCollector

    @property
    def view_manager(self):
        return self.content.viewManager

    @property
    def root_folder(self):
        return self.content.rootFolder

    @property
    def about(self):
        return self.content.about

    def is_vcenter(self):
        return self.about.apiType == 'VirtualCenter'

    def close(self):
        if self.connected:
            logger.debug("Logging out of %s", self.server)
            Disconnect(self.service_instance)
            self.connected = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()


def connect(server, user, password, port=443, insecure=False):
    """
    Log in to ``server`` and return a Session.

    With ``insecure`` the server certificate is not verified.
    """
    kwargs = {}
    if insecure:
        kwargs['sslContext'] = trust_all_certificates()

    logger.info("Connecting to %s:%s as %s", server, port, user)
    try:
        si = SmartConnect(host=server,
                          user=user,
                          pwd=password,
                          port=port,
                          disableSslCertValidation=insecure,
                          **kwargs)
    except vim.fault.InvalidLogin as error:
        raise ConnectionFailure("Cannot log in to %s as %s: %s"
                                % (server, user, error.msg)) from error
    except OSError as error:
        raise ConnectionFailure("Cannot connect to %s:%s: %s"
                                % (server, port, error)) from error

    try:
        return Session(si, server)
    except Exception:
        Disconnect(si)
        raise


def disconnect(session):
    session.close()
