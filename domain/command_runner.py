from abc import ABC, abstractmethod
from typing import Optional


class CommandRunner(ABC):
    """Runs a shell command line and returns its trimmed standard output."""
    
    @abstractmethod
    def run(self, command: str, cwd: Optional[str] = None) -> str:
        """
        Execute command and return stdout with surrounding whitespace removed.
        
        Raises:
            CommandError: If the command cannot be started or exits non-zero
        """
        pass
