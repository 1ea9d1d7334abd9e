"""
Connection settings from vc_info.ini (see vc_info.ini.sample).

max_wait_seconds, poll_retries and retry_backoff tune long polls made through
wait_for_condition(); library callers turn them into WaitOptions.from_config()
and RetryPolicy.from_config(). The vm-uuids command only reads properties and
never waits on a task, so it ignores them.
"""

import os
from configparser import ConfigParser, Error as ConfigParserError

from vsphere_uuids.exceptions import ConfigError

SECTION = 'config'
DEFAULT_CONFIG_FILE = 'vc_info.ini'


class VcInfo(object):
    def __init__(self, server, username, password, port=443, insecure=False,
                 max_wait_seconds=60, poll_retries=0, retry_backoff=1.0):
        self.server = server
        self.username = username
        self.password = password
        self.port = port
        self.insecure = insecure
        self.max_wait_seconds = max_wait_seconds
        self.poll_retries = poll_retries
        self.retry_backoff = retry_backoff

    def __repr__(self):
        return "VcInfo(server=%r, username=%r, port=%r)" % (self.server, self.username, self.port)


def load_config(path=DEFAULT_CONFIG_FILE):
    """
    Read ``path``. Returns None when the file does not exist.
    """
    if not os.path.exists(path):
        return None

    config = ConfigParser()
    try:
        config.read(path)
        vc_info = VcInfo(
            server=config.get(SECTION, 'server'),
            username=config.get(SECTION, 'username'),
            password=config.get(SECTION, 'password'),
            port=config.getint(SECTION, 'port', fallback=443),
            insecure=config.getboolean(SECTION, 'insecure', fallback=False),
            max_wait_seconds=config.getint(SECTION, 'max_wait_seconds', fallback=60),
            poll_retries=config.getint(SECTION, 'poll_retries', fallback=0),
            retry_backoff=config.getfloat(SECTION, 'retry_backoff', fallback=1.0))
    except (ConfigParserError, ValueError) as error:
        raise ConfigError("%s: %s" % (path, error)) from error

    for option in ('max_wait_seconds', 'poll_retries', 'retry_backoff'):
        if getattr(vc_info, option) < 0:
            raise ConfigError("%s: %s must not be negative" % (path, option))
    return vc_info
