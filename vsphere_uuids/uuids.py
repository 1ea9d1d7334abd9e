#!/usr/bin/env python
"""
Prints out a virtual machine's UUIDs, its managed object reference and,
when connected to a vCenter, the vCenter's instance UUID.

    vm-uuids vcenter.example.com administrator@vsphere.local secret my-vm
    vm-uuids --config vc_info.ini my-vm
"""

import argparse
import logging

from pyVmomi import vim, vmodl

from vsphere_uuids import config as vc_config
from vsphere_uuids.connection import connect
from vsphere_uuids.exceptions import ConfigError, ConnectionFailure, VsphereUuidsError
from vsphere_uuids.find_objects import get_related, resolve_object_by_name
from vsphere_uuids.properties import moref_string

logger = logging.getLogger(__name__)

INSTANCE_UUID = 'summary.config.instanceUuid'
BIOS_UUID = 'summary.config.uuid'
NEEDED_PROPERTIES = ('name', INSTANCE_UUID, BIOS_UUID)


class Uuids(object):
    """
    Looks up virtual machines by name on an open Session and reads their
    identifiers. Each VM is looked up once.
    """

    def __init__(self, session):
        self.session = session
        self._found = {}

    def find_vm(self, vm_name):
        if vm_name not in self._found:
            self._found[vm_name] = resolve_object_by_name(
                self.session, vim.VirtualMachine, vm_name, NEEDED_PROPERTIES)
        return self._found[vm_name]

    @staticmethod
    def not_found_message(vm_name):
        return "Did not find a VirtualMachine named %s, so nothing was done." % vm_name

    def get_uuid(self, vm_name):
        vm = self.find_vm(vm_name)
        if vm is None:
            return self.not_found_message(vm_name)
        return vm.get_string(INSTANCE_UUID)

    def get_bios_uuid(self, vm_name):
        vm = self.find_vm(vm_name)
        if vm is None:
            return self.not_found_message(vm_name)
        return vm.get_string(BIOS_UUID)

    def get_moref_string(self, vm_name):
        vm = self.find_vm(vm_name)
        if vm is None:
            return self.not_found_message(vm_name)
        return vm.moref_string()

    def get_host_moref_string(self, vm_name):
        """The ESXi host the VM is registered on, or None."""
        vm = self.find_vm(vm_name)
        if vm is None:
            return None
        host = get_related(self.session, vm.obj, 'runtime.host')
        return moref_string(host) if host is not None else None

    def get_vcenter_uuid(self):
        if self.session.is_vcenter():
            return self.session.about.instanceUuid
        return None


def build_arg_parser():
    parser = argparse.ArgumentParser(
        description="Print the UUIDs of a virtual machine.")
    parser.add_argument('args', nargs='+', metavar='ARG',
                        help="SERVER USER PASSWORD VM_NAME, or only VM_NAME "
                             "when the connection comes from --config")
    parser.add_argument('-c', '--config',
                        help="INI file with a [config] section holding server, "
                             "username and password (default: %s)"
                             % vc_config.DEFAULT_CONFIG_FILE)
    parser.add_argument('-o', '--port', type=int,
                        help="Port to connect on (default: 443)")
    parser.add_argument('--insecure', action='store_true', default=None,
                        help="Do not verify the server certificate")
    parser.add_argument('-v', '--verbose', action='store_true',
                        help="Log debug output")
    return parser


def get_vc_info(parser, args):
    """Merge the command line over vc_info.ini; exits on malformed input."""
    if len(args.args) == 4:
        server, username, password, vm_name = args.args
        vc_info = vc_config.VcInfo(server, username, password)
    elif len(args.args) == 1:
        vm_name = args.args[0]
        vc_info = vc_config.load_config(args.config or vc_config.DEFAULT_CONFIG_FILE)
        if vc_info is None:
            parser.error("no SERVER USER PASSWORD given and no config file found")
    else:
        parser.error("wrong number of arguments, must provide four arguments: "
                     "[1] the server name or IP address "
                     "[2] the user name to log in as "
                     "[3] the password to use "
                     "[4] the name of the VM")

    if args.port is not None:
        vc_info.port = args.port
    if args.insecure is not None:
        vc_info.insecure = args.insecure
    return vc_info, vm_name


def print_uuids(uuids, vm_name):
    print("Name: %s" % vm_name)
    print("VM MoRef: %s" % uuids.get_moref_string(vm_name))
    print("VM InstanceUUID: %s" % uuids.get_uuid(vm_name))
    print("VM BIOS UUID: %s" % uuids.get_bios_uuid(vm_name))
    host = uuids.get_host_moref_string(vm_name)
    if host is not None:
        print("VM Host: %s" % host)
    vcenter_uuid = uuids.get_vcenter_uuid()
    if vcenter_uuid is not None:
        print("vCenter InstanceUUID: %s" % vcenter_uuid)


def main(argv=None):
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        vc_info, vm_name = get_vc_info(parser, args)
    except ConfigError as error:
        print("Bad configuration : " + str(error))
        return -1

    logger.debug("Looking up %s on %s", vm_name, vc_info.server)
    try:
        with connect(vc_info.server, vc_info.username, vc_info.password,
                     port=vc_info.port, insecure=vc_info.insecure) as session:
            print_uuids(Uuids(session), vm_name)
    except ConnectionFailure as error:
        print("Caught connection error : " + str(error))
        return -1
    except VsphereUuidsError as error:
        print("Error : " + str(error))
        return -1
    except vmodl.MethodFault as error:
        print("Caught vmodl fault : %s" % (error.msg or error))
        return -1

    return 0


# Start program
if __name__ == "__main__":
    raise SystemExit(main())
