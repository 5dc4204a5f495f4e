"""Restore and save against a real file-system store, with package manager commands stubbed."""

import pytest
from unittest.mock import Mock

from application.dtos import RestoreSettings
from application.restore_cache import RestoreCache
from application.save_cache import SaveCache
from domain.cache_path_resolver import CachePathResolver
from domain.command_runner import CommandRunner
from infrastructure.file_output_sink import FileOutputSink
from infrastructure.file_system_cache_store import FileSystemCacheStore


class TestRestoreSaveFlow:
    @pytest.fixture
    def workspace(self, tmp_path):
        workspace = tmp_path / "workspace"
        workspace.mkdir()
        (workspace / "yarn.lock").write_bytes(b"# yarn lockfile v1\nleft-pad@1.3.0\n")
        return workspace
    
    @pytest.fixture
    def yarn_cache(self, tmp_path):
        cache = tmp_path / "yarn-cache"
        cache.mkdir()
        return cache
    
    @pytest.fixture
    def runner(self, yarn_cache):
        runner = Mock(spec=CommandRunner)
        runner.run.side_effect = lambda command, cwd=None: "1.22.19" if "version" in command else str(yarn_cache)
        return runner
    
    @pytest.fixture
    def store(self, tmp_path):
        return FileSystemCacheStore(tmp_path / "store")
    
    def make_step(self, step_class, workspace, runner, store, state_file):
        return step_class(
            settings=RestoreSettings(runner_os="Linux", arch="x64", workspace=str(workspace)),
            path_resolver=CachePathResolver(runner),
            cache_store=store,
            output_sink=FileOutputSink(state_file=state_file)
        )
    
    def test_miss_save_then_hit(self, tmp_path, workspace, yarn_cache, runner, store):
        first_state = tmp_path / "run1.json"
        
        restore = self.make_step(RestoreCache, workspace, runner, store, first_state)
        outcome = restore.restore("yarn")
        assert outcome.hit is False
        assert outcome.requested_key.startswith("node-cache-Linux-x64-yarn-")
        
        (yarn_cache / "left-pad-1.3.0.tgz").write_bytes(b"tarball")
        assert self.make_step(SaveCache, workspace, runner, store, first_state).save("yarn") is True
        
        for child in yarn_cache.iterdir():
            child.unlink()
        
        second_state = tmp_path / "run2.json"
        outcome = self.make_step(RestoreCache, workspace, runner, store, second_state).restore("yarn")
        assert outcome.hit is True
        assert (yarn_cache / "left-pad-1.3.0.tgz").read_bytes() == b"tarball"
        assert self.make_step(SaveCache, workspace, runner, store, second_state).save("yarn") is False
    
    def test_lock_file_change_misses(self, tmp_path, workspace, yarn_cache, runner, store):
        state = tmp_path / "state.json"
        self.make_step(RestoreCache, workspace, runner, store, state).restore("yarn")
        self.make_step(SaveCache, workspace, runner, store, state).save("yarn")
        
        (workspace / "yarn.lock").write_bytes(b"# yarn lockfile v1\nleft-pad@1.3.1\n")
        
        outcome = self.make_step(RestoreCache, workspace, runner, store, tmp_path / "state2.json").restore("yarn")
        assert outcome.hit is False
