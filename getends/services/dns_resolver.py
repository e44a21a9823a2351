import ipaddress
import logging
import os
from dataclasses import dataclass
from typing import Callable, Optional

import dns.exception
import dns.resolver

from getends.exceptions import DnsResolutionError

logger = logging.getLogger(__name__)

if os.name == "nt":
    DEFAULT_HOSTS_PATH = os.path.join(os.environ.get("SystemRoot", r"C:\Windows"), "System32", "drivers", "etc", "hosts")
else:
    DEFAULT_HOSTS_PATH = "/etc/hosts"


@dataclass(frozen=True)
class DnsResolverConfig:
    """Nameservers used for outbound connections, tried in order.

    `hosts_path` is read before any nameserver is queried; `None` skips it.
    """

    primary: str = "1.1.1.1"
    fallback: Optional[str] = "8.8.8.8"
    port: int = 53
    timeout: float = 10.0
    hosts_path: Optional[str] = DEFAULT_HOSTS_PATH

    @property
    def nameservers(self) -> tuple[str, ...]:
        return tuple(ns for ns in (self.primary, self.fallback) if ns)


def _is_ip_literal(host: str) -> bool:
    try:
        ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        return False
    return True


def lookup_hosts_file(path: str, host: str) -> Optional[str]:
    """Return the address mapped to `host` in a hosts(5) file, preferring IPv4.

    A missing or unreadable file counts as having no entries.
    """
    name = host.rstrip(".").lower()
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            lines = f.readlines()
    except OSError as e:
        logger.debug("Hosts file %s not readable: %s", path, e)
        return None

    matches = []
    for line in lines:
        fields = line.split("#", 1)[0].split()
        if len(fields) < 2 or not _is_ip_literal(fields[0]):
            continue
        if name in (alias.rstrip(".").lower() for alias in fields[1:]):
            matches.append(fields[0].split("%", 1)[0])

    for address in matches:
        if ipaddress.ip_address(address).version == 4:
            return address
    return matches[0] if matches else None


class PublicDnsResolver:
    """Resolve hostnames through fixed public nameservers instead of the system resolver.

    Names listed in the hosts file are answered from it, as the system
    resolver would. Called once per new TCP connection; nothing is cached. The fallback
    nameserver is only tried when the primary cannot be reached. A definitive
    answer from the primary (NXDOMAIN, no records) is final.
    """

    def __init__(
        self,
        config: DnsResolverConfig,
        resolver_factory: Optional[Callable[[], dns.resolver.Resolver]] = None,
    ):
        self.config = config
        self._resolver_factory = resolver_factory or (lambda: dns.resolver.Resolver(configure=False))

    def resolve(self, host: str) -> str:
        """Return one IP address for `host` as a string."""
        if _is_ip_literal(host):
            return host.strip("[]")

        if self.config.hosts_path:
            address = lookup_hosts_file(self.config.hosts_path, host)
            if address:
                logger.debug("Resolved %s -> %s via %s", host, address, self.config.hosts_path)
                return address

        last_error: Optional[Exception] = None
        for nameserver in self.config.nameservers:
            try:
                return self._query(nameserver, host)
            except (dns.exception.Timeout, dns.resolver.NoNameservers, OSError) as e:
                logger.debug("Nameserver %s unreachable while resolving %s: %s", nameserver, host, e)
                last_error = e
            except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer) as e:
                raise DnsResolutionError(host, str(e)) from e
            except dns.exception.DNSException as e:
                raise DnsResolutionError(host, str(e)) from e

        raise DnsResolutionError(host, f"no nameserver reachable: {last_error}") from last_error

    def _query(self, nameserver: str, host: str) -> str:
        resolver = self._resolver_factory()
        resolver.nameservers = [nameserver]
        resolver.port = self.config.port
        resolver.timeout = self.config.timeout
        resolver.lifetime = self.config.timeout
        try:
            answer = resolver.resolve(host, "A", search=False)
        except dns.resolver.NoAnswer:
            answer = resolver.resolve(host, "AAAA", search=False)
        address = answer[0].to_text()
        logger.debug("Resolved %s -> %s via %s", host, address, nameserver)
        return address
