"""ZIP utility for archiving cache directories."""
import zipfile
from pathlib import Path
from typing import List

from .hash_constants import BLOCK_SIZE


class ZipUtil:
    """Utility class for packing and unpacking cache directories."""
    
    @staticmethod
    def create_zip_from_directories(zip_path: Path, paths: List[str]) -> None:
        """
        Creates a ZIP at zip_path holding every file below each directory in
        paths. Files of paths[i] are stored under the arcname prefix "<i>/".
        
        Args:
            zip_path: Path where the ZIP file should be created
            paths: Directories to archive, in order
        """
        zip_path.parent.mkdir(parents=True, exist_ok=True)
        
        with zipfile.ZipFile(zip_path, "w", zipfile.ZIP_DEFLATED) as zf:
            for index, directory in enumerate(paths):
                base = Path(directory)
                for file_path in sorted(base.rglob("*")):
                    if file_path.is_file():
                        rel_path = file_path.relative_to(base).as_posix()
                        zf.write(file_path, arcname=f"{index}/{rel_path}")
    
    @staticmethod
    def extract_zip_to_directories(zip_path: Path, paths: List[str]) -> int:
        """
        Extracts the ZIP at zip_path, writing entries "<i>/..." below paths[i].
        Entries for indexes without a target directory are skipped.
        
        Returns:
            The number of files extracted
            
        Raises:
            ValueError: If an entry would escape its target directory
        """
        extracted = 0
        with zipfile.ZipFile(zip_path, "r") as zf:
            for member in zf.infolist():
                if member.is_dir():
                    continue
                index, _, rel_path = member.filename.partition("/")
                if not index.isdigit() or int(index) >= len(paths) or not rel_path:
                    continue
                
                target_root = Path(paths[int(index)]).resolve()
                target = (target_root / rel_path).resolve()
                if target != target_root and target_root not in target.parents:
                    raise ValueError(f"Archive entry escapes target directory: {member.filename}")
                
                target.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(member) as src, open(target, "wb") as dst:
                    while True:
                        chunk = src.read(BLOCK_SIZE)
                        if not chunk:
                            break
                        dst.write(chunk)
                extracted += 1
        return extracted
