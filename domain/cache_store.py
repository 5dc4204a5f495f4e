from abc import ABC, abstractmethod
from typing import List, Optional


class CacheStore(ABC):
    """
    Remote cache interface used by the restore and save steps.
    
    Implementations own the archive format and the transport; the restore
    logic only sees keys and directories.
    """
    
    @abstractmethod
    def restore_cache(self, paths: List[str], primary_key: str) -> Optional[str]:
        """
        Restore the archive saved under primary_key into paths.
        
        Args:
            paths: Non-empty ordered list of directories to restore into
            primary_key: The requested cache key
            
        Returns:
            The key that was restored, or None on a cache miss
            
        Raises:
            RemoteLookupError: If the store cannot be reached or the archive is unreadable
        """
        pass
    
    @abstractmethod
    def save_cache(self, paths: List[str], key: str) -> None:
        """
        Archive paths and store them under key.
        
        Raises:
            RemoteLookupError: If the upload fails
        """
        pass
    
    def close(self) -> None:
        """Release transport resources held by the store."""
        pass
