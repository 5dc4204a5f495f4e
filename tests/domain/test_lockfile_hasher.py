import hashlib
from pathlib import Path
from unittest.mock import patch

import pytest

from domain.errors import HashComputationError
from domain.lockfile_hasher import LockFileHasher, resolve_lock_file_patterns
from domain.package_manager import get_package_manager_info


class TestLockFileHasher:
    @pytest.fixture
    def hasher(self):
        return LockFileHasher()
    
    @pytest.fixture
    def workspace(self, tmp_path):
        (tmp_path / "package-lock.json").write_bytes(b'{"lockfileVersion": 3}')
        (tmp_path / "packages" / "app").mkdir(parents=True)
        (tmp_path / "packages" / "app" / "package-lock.json").write_bytes(b'{"name": "app"}')
        return tmp_path
    
    def test_no_match_returns_empty_string(self, hasher, tmp_path):
        assert hasher.hash_files(["package-lock.json", "yarn.lock"], str(tmp_path)) == ""
    
    def test_hash_of_single_file(self, hasher, workspace):
        inner = hashlib.sha256(b'{"lockfileVersion": 3}').digest()
        expected = hashlib.sha256(inner).hexdigest()
        
        assert hasher.hash_files(["package-lock.json"], str(workspace)) == expected
    
    def test_same_content_same_hash(self, hasher, workspace):
        first = hasher.hash_files(["**/package-lock.json"], str(workspace))
        second = hasher.hash_files(["**/package-lock.json"], str(workspace))
        
        assert first == second
        assert len(first) == 64
    
    def test_content_change_changes_hash(self, hasher, workspace):
        before = hasher.hash_files(["**/package-lock.json"], str(workspace))
        (workspace / "packages" / "app" / "package-lock.json").write_bytes(b'{"name": "app", "v": 2}')
        
        assert hasher.hash_files(["**/package-lock.json"], str(workspace)) != before
    
    def test_adding_file_changes_hash(self, hasher, workspace):
        before = hasher.hash_files(["package-lock.json", "yarn.lock"], str(workspace))
        (workspace / "yarn.lock").write_bytes(b"# yarn lockfile v1\n")
        
        assert hasher.hash_files(["package-lock.json", "yarn.lock"], str(workspace)) != before
    
    def test_pattern_order_does_not_matter(self, hasher, workspace):
        (workspace / "yarn.lock").write_bytes(b"# yarn lockfile v1\n")
        
        assert hasher.hash_files(["yarn.lock", "package-lock.json"], str(workspace)) == \
            hasher.hash_files(["package-lock.json", "yarn.lock"], str(workspace))
    
    def test_overlapping_patterns_count_files_once(self, hasher, workspace):
        assert hasher.hash_files(["package-lock.json", "*.json"], str(workspace)) == \
            hasher.hash_files(["package-lock.json"], str(workspace))
    
    def test_match_files_sorted(self, hasher, workspace):
        files = hasher.match_files(["**/package-lock.json"], str(workspace))
        
        assert files == sorted(files)
        assert [f.name for f in files] == ["package-lock.json", "package-lock.json"]
    
    def test_directories_are_ignored(self, hasher, workspace):
        assert hasher.match_files(["packages"], str(workspace)) == []
    
    def test_files_outside_root_are_ignored(self, hasher, tmp_path):
        root = tmp_path / "project"
        root.mkdir()
        (tmp_path / "package-lock.json").write_bytes(b"outside")
        
        assert hasher.hash_files(["../package-lock.json"], str(root)) == ""
    
    def test_workspace_with_glob_characters(self, hasher, tmp_path):
        root = tmp_path / "build[1]"
        root.mkdir()
        (root / "package-lock.json").write_bytes(b'{"lockfileVersion": 3}')
        inner = hashlib.sha256(b'{"lockfileVersion": 3}').digest()
        
        assert hasher.hash_files(["package-lock.json"], str(root)) == hashlib.sha256(inner).hexdigest()
        
        (root / "package-lock.json").write_bytes(b'{"lockfileVersion": 2}')
        assert hasher.hash_files(["package-lock.json"], str(root)) != hashlib.sha256(inner).hexdigest()
    
    def test_blank_patterns_are_skipped(self, hasher, workspace):
        assert hasher.hash_files(["", "  "], str(workspace)) == ""
    
    def test_read_error_raises(self, hasher, workspace):
        with patch("builtins.open", side_effect=PermissionError("denied")):
            with pytest.raises(HashComputationError, match="denied"):
                hasher.hash_files(["package-lock.json"], str(workspace))


class TestResolveLockFilePatterns:
    @pytest.fixture
    def npm(self):
        return get_package_manager_info("npm")
    
    def test_defaults_to_registry_patterns(self, npm, tmp_path):
        assert resolve_lock_file_patterns(npm, "", str(tmp_path)) == list(npm.lock_file_patterns)
    
    def test_explicit_patterns(self, npm, tmp_path):
        patterns = resolve_lock_file_patterns(npm, "app/package-lock.json\n\n  lib/*.lock  \n", str(tmp_path))
        
        assert patterns == ["app/package-lock.json", "lib/*.lock"]
    
    def test_directory_expands_to_registry_patterns(self, npm, tmp_path):
        (tmp_path / "frontend").mkdir()
        
        patterns = resolve_lock_file_patterns(npm, "frontend/", str(tmp_path))
        
        assert patterns == [f"frontend/{p}" for p in npm.lock_file_patterns]
    
    def test_sub_path_hashing(self, npm, tmp_path):
        frontend = Path(tmp_path) / "frontend"
        frontend.mkdir()
        (frontend / "package-lock.json").write_bytes(b"frontend lock")
        (tmp_path / "package-lock.json").write_bytes(b"root lock")
        hasher = LockFileHasher()
        
        sub_hash = hasher.hash_files(resolve_lock_file_patterns(npm, "frontend", str(tmp_path)), str(tmp_path))
        root_hash = hasher.hash_files(resolve_lock_file_patterns(npm, "", str(tmp_path)), str(tmp_path))
        
        assert sub_hash and root_hash
        assert sub_hash != root_hash
