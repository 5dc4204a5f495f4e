"""Static registry of the package managers whose caches can be restored."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from .errors import UnsupportedPackageManagerError


@dataclass(frozen=True)
class PackageManagerInfo:
    """Commands and lock file patterns for one package manager."""
    name: str
    lock_file_patterns: Tuple[str, ...]
    cache_folder_command: str
    version_command: Optional[str] = None
    legacy_cache_folder_command: Optional[str] = None
    legacy_version_prefix: str = "1"

    @property
    def has_generations(self) -> bool:
        return self.version_command is not None and self.legacy_cache_folder_command is not None

    def cache_folder_command_for(self, version: str) -> str:
        """
        Pick the cache directory command for the reported tool version.
        
        This is a plain prefix check: any version starting with the legacy
        prefix is the legacy generation, everything else (including empty or
        unexpected output) is the latest generation.
        """
        if self.has_generations and version.startswith(self.legacy_version_prefix):
            return self.legacy_cache_folder_command
        return self.cache_folder_command


PACKAGE_MANAGERS: Mapping[str, PackageManagerInfo] = MappingProxyType({
    "npm": PackageManagerInfo(
        name="npm",
        lock_file_patterns=("package-lock.json", "npm-shrinkwrap.json", "yarn.lock"),
        cache_folder_command="npm config get cache",
    ),
    "pnpm": PackageManagerInfo(
        name="pnpm",
        lock_file_patterns=("pnpm-lock.yaml",),
        cache_folder_command="pnpm store path --silent",
    ),
    "yarn": PackageManagerInfo(
        name="yarn",
        lock_file_patterns=("yarn.lock",),
        cache_folder_command="yarn config get cacheFolder",
        version_command="yarn --version",
        legacy_cache_folder_command="yarn cache dir",
    ),
})


def get_package_manager_info(package_manager: str) -> PackageManagerInfo:
    """Return the registry entry for package_manager or raise UnsupportedPackageManagerError."""
    info = PACKAGE_MANAGERS.get(package_manager)
    if info is None:
        raise UnsupportedPackageManagerError(package_manager)
    return info


def supported_package_managers() -> Tuple[str, ...]:
    return tuple(PACKAGE_MANAGERS)
