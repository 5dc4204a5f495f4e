import os
import json
import time
import hashlib
import logging
import tempfile
import threading
import zipfile
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional

from domain.cache_store import CacheStore
from domain.errors import RemoteLookupError
from domain.hash_constants import HASH_ALGORITHM, BLOCK_SIZE, HASH_PREFIX_LENGTH
from domain.zip_util import ZipUtil

logger = logging.getLogger(__name__)


class FileSystemCacheStore(CacheStore):
    """
    Cache store keeping one ZIP archive per cache key on the local disk.
    
    Layout: bundles/<h0h1>/<h2h3>/<sha256(key)>.zip with a .json metadata
    file next to it recording the original key.
    """
    
    def __init__(self, cache_dir: Path):
        self.cache_dir = Path(cache_dir)
        self.bundles_dir = self.cache_dir / "bundles"
        self.bundles_dir.mkdir(parents=True, exist_ok=True)
        
        self._lock = threading.Lock()
        self.zip_util = ZipUtil()
    
    def restore_cache(self, paths: List[str], primary_key: str) -> Optional[str]:
        """Extract the archive stored under primary_key into paths."""
        archive_path = self.get_archive_path(primary_key)
        if archive_path is None:
            logger.debug("No archive for key %s", primary_key)
            return None
        
        try:
            count = self.zip_util.extract_zip_to_directories(archive_path, paths)
        except (zipfile.BadZipFile, ValueError) as e:
            raise RemoteLookupError(f"Cache archive for key {primary_key} is unreadable: {e}") from e
        
        logger.debug("Restored %d file(s) from key %s", count, primary_key)
        return primary_key
    
    def save_cache(self, paths: List[str], key: str) -> None:
        """Archive paths and store them under key, replacing any previous archive."""
        with tempfile.TemporaryDirectory(prefix="node_cache_") as tmp_dir:
            zip_path = Path(tmp_dir) / "cache.zip"
            self.zip_util.create_zip_from_directories(zip_path, paths)
            with open(zip_path, "rb") as f:
                self.store_archive(key, f, paths)
    
    def store_archive(self, key: str, stream: BinaryIO, paths: Optional[List[str]] = None) -> int:
        """
        Write an archive read from stream under key. Returns its size in bytes.
        
        The archive is written to a temporary file and renamed into place so
        readers never see a partial archive.
        """
        bundle_path = self._get_bundle_path(key)
        bundle_path.parent.mkdir(parents=True, exist_ok=True)
        
        with self._lock:
            fd, tmp_name = tempfile.mkstemp(dir=bundle_path.parent, suffix=".tmp")
            size = 0
            try:
                with os.fdopen(fd, "wb") as dst:
                    while True:
                        chunk = stream.read(BLOCK_SIZE)
                        if not chunk:
                            break
                        dst.write(chunk)
                        size += len(chunk)
                os.replace(tmp_name, bundle_path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
            
            metadata = {"key": key, "paths": paths or [], "size": size, "created": time.time()}
            with open(self._get_metadata_path(key), 'w') as f:
                json.dump(metadata, f, indent=2, sort_keys=True)
        
        logger.debug("Stored archive for key %s (%d bytes)", key, size)
        return size
    
    def get_archive_path(self, key: str) -> Optional[Path]:
        """Get the path to the archive for key if it exists."""
        bundle_path = self._get_bundle_path(key)
        if bundle_path.exists():
            return bundle_path
        return None
    
    def get_cache_stats(self) -> Dict[str, Any]:
        """Get statistics about the cache."""
        total_archives = 0
        cache_size_bytes = 0
        
        for bundle_file in self.bundles_dir.rglob("*.zip"):
            if bundle_file.is_file():
                total_archives += 1
                cache_size_bytes += bundle_file.stat().st_size
        
        return {
            "total_archives": total_archives,
            "cache_size_bytes": cache_size_bytes
        }
    
    def cleanup_old_archives(self, max_age_seconds: int) -> int:
        """Remove archives older than max_age_seconds. Returns how many were removed."""
        current_time = time.time()
        removed = 0
        
        with self._lock:
            for bundle_file in self.bundles_dir.rglob("*.zip"):
                if current_time - bundle_file.stat().st_mtime > max_age_seconds:
                    try:
                        bundle_file.unlink()
                        bundle_file.with_suffix(".json").unlink(missing_ok=True)
                        removed += 1
                    except OSError as e:
                        logger.warning("Could not remove %s: %s", bundle_file, e)
        return removed
    
    def _get_bundle_path(self, key: str) -> Path:
        key_hash = self._calculate_hash(key)
        h0 = key_hash[:HASH_PREFIX_LENGTH]
        h1 = key_hash[HASH_PREFIX_LENGTH:2 * HASH_PREFIX_LENGTH]
        return self.bundles_dir / h0 / h1 / f"{key_hash}.zip"
    
    def _get_metadata_path(self, key: str) -> Path:
        return self._get_bundle_path(key).with_suffix(".json")
    
    def _calculate_hash(self, key: str) -> str:
        hasher = hashlib.new(HASH_ALGORITHM)
        hasher.update(key.encode('utf-8'))
        return hasher.hexdigest()
