import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from domain.errors import CacheRestoreError
from domain.output_sink import OutputSink

logger = logging.getLogger(__name__)


class FileOutputSink(OutputSink):
    """
    Writes step outputs as name=value lines and keeps state in a JSON file.
    
    Both files are optional; outputs and state are always kept in memory so a
    restore and a save in the same process can share one sink.
    """
    
    def __init__(self, output_file: Optional[Path] = None, state_file: Optional[Path] = None):
        self.output_file = output_file
        self.state_file = state_file
        self.outputs: Dict[str, Any] = {}
        self._state: Dict[str, str] = self._load_state()
    
    def set_output(self, name: str, value: Any) -> None:
        self.outputs[name] = value
        logger.debug("Set output %s=%s", name, value)
        if self.output_file:
            self.output_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.output_file, 'a') as f:
                f.write(f"{name}={self._format_value(value)}\n")
    
    def save_state(self, name: str, value: str) -> None:
        self._state[name] = value
        if self.state_file:
            self.state_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.state_file, 'w') as f:
                json.dump(self._state, f, indent=2, sort_keys=True)
    
    def get_state(self, name: str) -> Optional[str]:
        return self._state.get(name)
    
    def _load_state(self) -> Dict[str, str]:
        if self.state_file and self.state_file.exists():
            try:
                with open(self.state_file, 'r') as f:
                    return json.load(f)
            except (OSError, ValueError) as e:
                raise CacheRestoreError(f"Could not read state file {self.state_file}: {e}") from e
        return {}
    
    @staticmethod
    def _format_value(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)
