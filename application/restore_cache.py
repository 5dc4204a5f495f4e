import json
import logging
from typing import Optional

from domain.cache_key import build_cache_key, normalize_arch
from domain.cache_path_resolver import CachePathResolver
from domain.cache_store import CacheStore
from domain.errors import RemoteLookupError
from domain.lockfile_hasher import LockFileHasher, resolve_lock_file_patterns
from domain.output_sink import OutputSink
from domain.package_manager import get_package_manager_info
from application.dtos import Outputs, RestoreOutcome, RestoreSettings, State

logger = logging.getLogger(__name__)


class RestoreCache:
    """Orchestrates restoring the dependency cache of one package manager."""
    
    def __init__(
        self,
        settings: RestoreSettings,
        path_resolver: CachePathResolver,
        cache_store: CacheStore,
        output_sink: OutputSink,
        hasher: Optional[LockFileHasher] = None
    ):
        self.settings = settings
        self.path_resolver = path_resolver
        self.cache_store = cache_store
        self.output_sink = output_sink
        self.hasher = hasher or LockFileHasher()
    
    def restore(self, package_manager: str, cache_dependency_path: str = "") -> RestoreOutcome:
        """
        Restore the cache for package_manager and report the outcome.
        
        Steps, each aborting the run on failure:
        1. Validate the package manager against the registry
        2. Resolve its local cache directory
        3. Hash the lock files
        4. Build the primary key
        5. Look the key up in the cache store
        6. Emit outputs and state
        
        A cache miss is a normal outcome, not an error.
        """
        info = get_package_manager_info(package_manager)
        
        cache_path = self.path_resolver.resolve(info, cwd=self.settings.workspace)
        
        patterns = resolve_lock_file_patterns(info, cache_dependency_path, self.settings.workspace)
        file_hash = self.hasher.hash_files(patterns, self.settings.workspace)
        if not file_hash:
            logger.warning(
                "No lock file matched %s in %s, the cache key will not match future lock files",
                ", ".join(patterns), self.settings.workspace
            )
        
        primary_key = build_cache_key(
            self.settings.key_prefix,
            self.settings.runner_os,
            normalize_arch(self.settings.arch),
            package_manager,
            file_hash
        )
        logger.debug("primary key is %s", primary_key)
        
        self.output_sink.save_state(State.CACHE_PRIMARY_KEY, primary_key)
        self.output_sink.save_state(State.CACHE_PATHS, json.dumps([cache_path]))
        self.output_sink.set_output(Outputs.CACHE_KEY, primary_key)
        
        try:
            matched_key = self.cache_store.restore_cache([cache_path], primary_key)
        except OSError as e:
            raise RemoteLookupError(f"Cache lookup failed for key {primary_key}: {e}") from e
        
        self.output_sink.set_output(Outputs.CACHE_MATCHED_KEY, matched_key)
        
        if not matched_key:
            logger.info("%s cache is not found", package_manager)
            self.output_sink.set_output(Outputs.CACHE_HIT, False)
            return RestoreOutcome(primary_key, None, False, cache_path)
        
        self.output_sink.save_state(State.CACHE_MATCHED_KEY, matched_key)
        logger.info("Cache restored from key: %s", matched_key)
        self.output_sink.set_output(Outputs.CACHE_HIT, True)
        return RestoreOutcome(primary_key, matched_key, True, cache_path)
