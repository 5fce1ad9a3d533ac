# cricket_collector/agent/identity.py

import ipaddress
import platform
import socket
from functools import lru_cache

from cricket_collector import __version__

COLLECTOR_NAME = "cricket-python-collector"

# Same naming as the released collector binaries
_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
}


def get_hostname() -> str:
    """
    Returns the local hostname, or "unknown" if it cannot be read.
    """
    try:
        hostname = socket.gethostname()
    except OSError:
        hostname = ""
    return hostname or "unknown"


def get_operating_system() -> str:
    return platform.system().lower() or "unknown"


def get_architecture() -> str:
    """
    Returns the CPU architecture using the names of the release builds
    (amd64, arm64, 386), or the raw machine string for anything else.
    """
    machine = platform.machine().lower()
    return _ARCH_ALIASES.get(machine, machine) or "unknown"


def _usable(address: str) -> str:
    try:
        if ipaddress.ip_address(address).is_loopback:
            return ""
    except ValueError:
        return ""
    return address


@lru_cache(maxsize=1)
def get_ip_address() -> str:
    """
    Best-effort primary IPv4 address, resolved once per process.

    Connecting a UDP socket only selects a route; no packet is sent.
    Loopback results are discarded. Returns an empty string when no
    address can be determined.
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            s.connect(("8.8.8.8", 80))
            return _usable(s.getsockname()[0])
    except OSError:
        try:
            return _usable(socket.gethostbyname(socket.gethostname()))
        except OSError:
            return ""


def get_tags() -> dict[str, str]:
    return {
        "collector": COLLECTOR_NAME,
        "version": __version__,
    }
