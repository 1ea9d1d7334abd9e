#!/usr/bin/env python
"""
Print a VM's UUIDs using the login info in vc_info.ini (see vc_info.ini.sample):

    python 00-get_vm_uuids.py --config vc_info.ini <vm name>
"""
from vsphere_uuids.uuids import main

# Start program
if __name__ == "__main__":
    raise SystemExit(main())
