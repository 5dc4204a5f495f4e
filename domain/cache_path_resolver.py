"""Discovery of the local cache directory used by a package manager."""

import logging
from typing import Optional

from .command_runner import CommandRunner
from .errors import CommandError, PathResolutionError
from .package_manager import PackageManagerInfo

logger = logging.getLogger(__name__)


class CachePathResolver:
    """Runs the registry commands of a package manager to find its cache folder."""
    
    def __init__(self, command_runner: CommandRunner):
        self.command_runner = command_runner
    
    def resolve(self, info: PackageManagerInfo, cwd: Optional[str] = None) -> str:
        """
        Return the cache directory for the package manager described by info.
        
        Raises:
            PathResolutionError: If a command fails or prints nothing
        """
        command = self.get_cache_folder_command(info, cwd)
        cache_path = self._run(command, cwd)
        if not cache_path:
            raise PathResolutionError(f"Could not get cache folder path for {info.name}")
        
        logger.debug("%s path is %s", info.name, cache_path)
        return cache_path
    
    def get_cache_folder_command(self, info: PackageManagerInfo, cwd: Optional[str] = None) -> str:
        if not info.has_generations:
            return info.cache_folder_command
        
        version = self._run(info.version_command, cwd)
        logger.debug("%s version is %s", info.name, version)
        return info.cache_folder_command_for(version)
    
    def _run(self, command: str, cwd: Optional[str]) -> str:
        try:
            return self.command_runner.run(command, cwd=cwd)
        except CommandError as e:
            raise PathResolutionError(str(e)) from e
