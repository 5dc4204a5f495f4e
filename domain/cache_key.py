"""Cache key composition."""

from typing import Dict

# Python machine names mapped onto the architecture names used in stored keys
_ARCH_ALIASES: Dict[str, str] = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "ia32",
    "i686": "ia32",
    "x86": "ia32",
    "armv7l": "arm",
}


def normalize_arch(machine: str) -> str:
    machine = machine.strip().lower()
    return _ARCH_ALIASES.get(machine, machine)


def build_cache_key(prefix: str, runner_os: str, arch: str, package_manager: str, lock_file_hash: str) -> str:
    """
    Build the primary cache key: <prefix>-<os>-<arch>-<manager>-<hash>.
    
    An empty lock_file_hash still yields a valid key ending in "-".
    """
    return "-".join([prefix, runner_os, arch, package_manager, lock_file_hash])
