"""Content hashing of lock files matched by glob patterns."""

import glob
import hashlib
import logging
import os
from pathlib import Path
from typing import Iterable, List

from .errors import HashComputationError
from .hash_constants import HASH_ALGORITHM, BLOCK_SIZE
from .package_manager import PackageManagerInfo

logger = logging.getLogger(__name__)


class LockFileHasher:
    """
    Computes one digest over every file matched by a list of glob patterns.
    
    Each matched file is hashed on its own, then the per-file digests are fed
    in sorted path order into an outer hash. No match yields an empty string.
    """
    
    def hash_files(self, patterns: Iterable[str], root_dir: str) -> str:
        files = self.match_files(patterns, root_dir)
        if not files:
            return ""
        
        hasher = hashlib.new(HASH_ALGORITHM)
        for file_path in files:
            hasher.update(self.compute_file_digest(file_path))
        
        logger.debug("Hashed %d lock file(s) under %s", len(files), root_dir)
        return hasher.hexdigest()
    
    def match_files(self, patterns: Iterable[str], root_dir: str) -> List[Path]:
        """Return the regular files under root_dir matched by patterns, sorted and de-duplicated."""
        root = Path(root_dir).resolve()
        matched = set()
        
        for pattern in patterns:
            pattern = pattern.strip()
            if not pattern:
                continue
            for match in glob.glob(os.path.join(glob.escape(str(root)), pattern), recursive=True):
                path = Path(match).resolve()
                if not path.is_file():
                    continue
                if not self._is_inside(path, root):
                    logger.debug("Ignore '%s' since it is not under %s", path, root)
                    continue
                matched.add(path)
        
        return sorted(matched)
    
    def compute_file_digest(self, file_path: Path) -> bytes:
        """
        Calculates the SHA256 of a file's content in blocks.
        """
        sha = hashlib.new(HASH_ALGORITHM)
        try:
            with open(file_path, "rb") as f:
                while True:
                    chunk = f.read(BLOCK_SIZE)
                    if not chunk:
                        break
                    sha.update(chunk)
        except OSError as e:
            raise HashComputationError(f"Failed to read lock file {file_path}: {e}") from e
        return sha.digest()
    
    @staticmethod
    def _is_inside(path: Path, root: Path) -> bool:
        try:
            path.relative_to(root)
        except ValueError:
            return False
        return True


def resolve_lock_file_patterns(info: PackageManagerInfo, cache_dependency_path: str, root_dir: str) -> List[str]:
    """
    Turn the user supplied dependency path into glob patterns.
    
    Without a dependency path the registry patterns of the package manager are
    used. Each line of the dependency path that names a directory expands to
    the registry patterns under that directory; any other line is a pattern.
    """
    lines = [line.strip() for line in (cache_dependency_path or "").splitlines() if line.strip()]
    if not lines:
        return list(info.lock_file_patterns)
    
    patterns = []
    for line in lines:
        if (Path(root_dir) / line).is_dir():
            patterns.extend(f"{line.rstrip('/')}/{pattern}" for pattern in info.lock_file_patterns)
        else:
            patterns.append(line)
    return patterns
