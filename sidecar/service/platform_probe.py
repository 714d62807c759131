"""
Host platform detection.

Determines CPU architecture and C library family, used to pick the bundled
binary variant for this host.
"""

import functools
import platform
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sidecar.service.runner import CommandRunner


class Architecture(str, Enum):
    AMD64 = 'amd64'
    AARCH64 = 'aarch64'


class LibcFamily(str, Enum):
    GLIBC = 'glibc'
    MUSL = 'musl'


@dataclass(frozen=True)
class PlatformSignature:
    """Architecture and libc of the host; None means detection was inconclusive"""

    architecture: Optional[Architecture] = None
    libc: Optional[LibcFamily] = None

    @property
    def known(self) -> bool:
        """True if both fields were detected and a bundled binary can be chosen"""
        return self.architecture is not None and self.libc is not None

    def __str__(self):
        arch = self.architecture.value if self.architecture else 'unknown'
        libc = self.libc.value if self.libc else 'unknown'
        return f"{arch}/{libc}"


def detect_architecture(machine=None):
    """
    Map a machine name (default: platform.machine()) to an Architecture.

    Returns:
        Architecture | None
    """
    machine = (machine if machine is not None else platform.machine()).lower()
    if 'aarch64' in machine or 'arm64' in machine:
        return Architecture.AARCH64
    if 'x86_64' in machine or 'amd64' in machine:
        return Architecture.AMD64
    return None


def detect_libc(runner=None):
    """
    Identify the C library by asking ldd, then by inspecting the interpreter.

    Returns:
        LibcFamily | None
    """
    runner = runner or CommandRunner()

    output, _ = runner.run(['ldd', '--version'])
    output = output.lower()
    if 'musl' in output:
        return LibcFamily.MUSL
    if 'glibc' in output or 'gnu libc' in output:
        return LibcFamily.GLIBC

    try:
        lib, _ = platform.libc_ver()
    except OSError:
        lib = ''
    if lib == 'glibc':
        return LibcFamily.GLIBC
    if lib == 'musl':
        return LibcFamily.MUSL
    return None


def probe_platform(runner=None, machine=None):
    """Detect the platform signature without caching. Never raises."""
    return PlatformSignature(
        architecture=detect_architecture(machine),
        libc=detect_libc(runner),
    )


@functools.lru_cache(maxsize=1)
def detect_platform():
    """Detect the platform signature once per process lifetime"""
    return probe_platform()
