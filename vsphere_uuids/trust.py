"""
Insecure TLS bootstrap for lab endpoints with self-signed certificates.

Accepts any server certificate and any hostname for every HTTPS connection
the process opens afterwards. Do not use this against a production vCenter.
"""

import logging
import ssl

import urllib3

logger = logging.getLogger(__name__)


def unverified_context():
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def trust_all_certificates():
    """
    Make every later HTTPS connection skip certificate and hostname checks.
    """
    logger.warning("Certificate verification disabled for all HTTPS connections")
    ssl._create_default_https_context = ssl._create_unverified_context

    # Disable the secure connection warning for demo purpose.
    # This is not recommended in a production environment.
    urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
    return unverified_context()
