import io
from typing import Optional
from pathlib import Path
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import StreamingResponse
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from domain.hash_constants import BLOCK_SIZE
from infrastructure.file_system_cache_store import FileSystemCacheStore


class Config:
    def __init__(self, cache_dir: str, max_archive_age: Optional[int] = None):
        self.cache_dir = cache_dir
        self.max_archive_age = max_archive_age


class CacheEntryDTO(BaseModel):
    key: str = Field(..., description="Cache key the archive was stored under")
    size: int = Field(..., description="Archive size in bytes")


class CacheStatsDTO(BaseModel):
    total_archives: int
    cache_size_bytes: int


config: Optional[Config] = None
cache_store: Optional[FileSystemCacheStore] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    global cache_store
    if config:
        cache_store = FileSystemCacheStore(Path(config.cache_dir))
        if config.max_archive_age:
            cache_store.cleanup_old_archives(config.max_archive_age)
    yield


app = FastAPI(
    title="Node Cache Server",
    description="Stores dependency cache archives keyed by cache key",
    version="1.0.0",
    lifespan=lifespan
)


def get_store() -> FileSystemCacheStore:
    if not cache_store:
        raise HTTPException(status_code=500, detail="Server not properly configured")
    return cache_store


@app.get("/v1/caches/{key}")
async def download_cache(key: str):
    """Stream the archive stored under key."""
    store = get_store()
    zip_path = store.get_archive_path(key)
    if not zip_path:
        raise HTTPException(status_code=404, detail="Cache not found")
    
    def iterfile():
        with open(zip_path, 'rb') as f:
            while chunk := f.read(BLOCK_SIZE):
                yield chunk
    
    return StreamingResponse(iterfile(), media_type="application/zip")


@app.put("/v1/caches/{key}", response_model=CacheEntryDTO, status_code=201)
async def upload_cache(key: str, request: Request):
    """Store the request body as the archive for key, replacing any existing one."""
    store = get_store()
    body = await request.body()
    if not body:
        raise HTTPException(status_code=400, detail="Empty cache archive")
    
    try:
        size = await run_in_threadpool(store.store_archive, key, io.BytesIO(body))
    except OSError as e:
        raise HTTPException(status_code=500, detail=f"Error storing cache: {str(e)}")
    
    return CacheEntryDTO(key=key, size=size)


@app.get("/v1/stats", response_model=CacheStatsDTO)
async def cache_stats():
    return CacheStatsDTO(**get_store().get_cache_stats())


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


def initialize_app(cache_dir: str, max_archive_age: Optional[int] = None):
    """Initialize the FastAPI application with configuration."""
    global config
    
    config = Config(cache_dir=cache_dir, max_archive_age=max_archive_age)
    
    # Create cache directory if it doesn't exist
    Path(cache_dir).mkdir(parents=True, exist_ok=True)
    
    return app
