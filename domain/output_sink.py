from abc import ABC, abstractmethod
from typing import Any, Optional


class OutputSink(ABC):
    """Named step outputs plus state handed from the restore step to the save step."""
    
    @abstractmethod
    def set_output(self, name: str, value: Any) -> None:
        pass
    
    @abstractmethod
    def save_state(self, name: str, value: str) -> None:
        pass
    
    @abstractmethod
    def get_state(self, name: str) -> Optional[str]:
        pass
