"""
Sample vSphere Web Services client: find a virtual machine by name and
print its identifiers.
"""

__version__ = '1.0.0'
