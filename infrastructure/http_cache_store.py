import logging
import tempfile
import zipfile
from pathlib import Path
from typing import List, Optional, Union
from urllib.parse import quote

import httpx

from domain.cache_store import CacheStore
from domain.errors import RemoteLookupError
from domain.hash_constants import BLOCK_SIZE
from domain.zip_util import ZipUtil

logger = logging.getLogger(__name__)


class HttpCacheStore(CacheStore):
    """Cache store talking to the cache server over HTTP."""
    
    def __init__(self, client: Union[str, httpx.Client], timeout: float = 60.0):
        if isinstance(client, str):
            client = httpx.Client(base_url=client.rstrip('/'), timeout=timeout)
        self.client = client
        self.zip_util = ZipUtil()
    
    def restore_cache(self, paths: List[str], primary_key: str) -> Optional[str]:
        with tempfile.TemporaryDirectory(prefix="node_cache_") as tmp_dir:
            zip_path = Path(tmp_dir) / "cache.zip"
            
            try:
                with self.client.stream("GET", self._cache_url(primary_key)) as response:
                    if response.status_code == 404:
                        logger.debug("Server has no archive for key %s", primary_key)
                        return None
                    if response.status_code != 200:
                        raise RemoteLookupError(
                            f"Cache server returned {response.status_code} for key {primary_key}"
                        )
                    with open(zip_path, "wb") as f:
                        for chunk in response.iter_bytes(BLOCK_SIZE):
                            f.write(chunk)
            except httpx.HTTPError as e:
                raise RemoteLookupError(f"Cache server request failed for key {primary_key}: {e}") from e
            
            try:
                self.zip_util.extract_zip_to_directories(zip_path, paths)
            except (zipfile.BadZipFile, ValueError) as e:
                raise RemoteLookupError(f"Cache archive for key {primary_key} is unreadable: {e}") from e
        
        return primary_key
    
    def save_cache(self, paths: List[str], key: str) -> None:
        with tempfile.TemporaryDirectory(prefix="node_cache_") as tmp_dir:
            zip_path = Path(tmp_dir) / "cache.zip"
            self.zip_util.create_zip_from_directories(zip_path, paths)
            
            try:
                response = self.client.put(
                    self._cache_url(key),
                    content=zip_path.read_bytes(),
                    headers={"Content-Type": "application/zip"}
                )
            except httpx.HTTPError as e:
                raise RemoteLookupError(f"Cache upload failed for key {key}: {e}") from e
        
        if response.status_code not in (200, 201):
            raise RemoteLookupError(f"Cache server returned {response.status_code} while saving key {key}")
        logger.debug("Uploaded archive for key %s", key)
    
    def close(self) -> None:
        self.client.close()
    
    @staticmethod
    def _cache_url(key: str) -> str:
        return f"/v1/caches/{quote(key, safe='')}"
