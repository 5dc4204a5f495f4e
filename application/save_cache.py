import json
import logging
from pathlib import Path
from typing import List

from domain.cache_path_resolver import CachePathResolver
from domain.cache_store import CacheStore
from domain.errors import PathResolutionError, RemoteLookupError
from domain.output_sink import OutputSink
from domain.package_manager import get_package_manager_info
from application.dtos import RestoreSettings, State

logger = logging.getLogger(__name__)


class SaveCache:
    """Uploads the dependency cache after the build when the restore step missed."""
    
    def __init__(
        self,
        settings: RestoreSettings,
        path_resolver: CachePathResolver,
        cache_store: CacheStore,
        output_sink: OutputSink
    ):
        self.settings = settings
        self.path_resolver = path_resolver
        self.cache_store = cache_store
        self.output_sink = output_sink
    
    def save(self, package_manager: str) -> bool:
        """Save the cache under the key computed by the restore step. Returns True if uploaded."""
        info = get_package_manager_info(package_manager)
        
        primary_key = self.output_sink.get_state(State.CACHE_PRIMARY_KEY)
        matched_key = self.output_sink.get_state(State.CACHE_MATCHED_KEY)
        
        if not primary_key:
            logger.info(
                "Primary key was not generated. Please check the log messages above for more errors or information"
            )
            return False
        
        if primary_key == matched_key:
            logger.info("Cache hit occurred on the primary key %s, not saving cache.", primary_key)
            return False
        
        cache_paths = self._get_cache_paths(info)
        for cache_path in cache_paths:
            if not Path(cache_path).exists():
                raise PathResolutionError(
                    f"Cache folder path is retrieved for {package_manager} but doesn't exist on disk: {cache_path}"
                )
        
        try:
            self.cache_store.save_cache(cache_paths, primary_key)
        except OSError as e:
            raise RemoteLookupError(f"Cache upload failed for key {primary_key}: {e}") from e
        
        logger.info("Cache saved with the key: %s", primary_key)
        return True
    
    def _get_cache_paths(self, info) -> List[str]:
        saved = self.output_sink.get_state(State.CACHE_PATHS)
        if saved:
            return json.loads(saved)
        return [self.path_resolver.resolve(info, cwd=self.settings.workspace)]
