import logging
import shlex
import subprocess
from typing import Optional

from domain.command_runner import CommandRunner
from domain.errors import CommandError

logger = logging.getLogger(__name__)


class SubprocessCommandRunner(CommandRunner):
    """Runs package manager commands locally through subprocess."""
    
    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout
    
    def run(self, command: str, cwd: Optional[str] = None) -> str:
        logger.debug("Running '%s' (cwd=%s)", command, cwd)
        try:
            result = subprocess.run(
                shlex.split(command),
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise CommandError(command, f"The '{command}' command could not be run: {e}")
        
        if result.returncode != 0:
            stderr = result.stderr.strip()
            message = stderr or f"The '{command}' command failed with exit code: {result.returncode}"
            raise CommandError(command, message, result.returncode)
        
        return result.stdout.strip()
