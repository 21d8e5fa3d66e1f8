"""Best-effort DNS name resolution."""

import logging
import socket


class NameResolver:
    """Resolve a host to its fully-qualified name, never failing."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger.getChild(self.__class__.__name__)

    def resolve(self, host: str) -> str:
        """
        Return the FQDN for host, or host itself if lookup fails.

        Args:
            host: Machine name or address

        Returns:
            str: Fully-qualified name or the original host string
        """
        try:
            fqdn = socket.getfqdn(host)
        except (OSError, UnicodeError) as e:
            self.logger.warning(f"Name resolution failed for {host}: {e}")
            return host

        if not fqdn:
            return host
        if fqdn.lower() == host.lower():
            self.logger.debug(f"No FQDN found for {host}, using it as-is")
        return fqdn
