import subprocess
from unittest.mock import Mock, patch

import pytest

from domain.cache_path_resolver import CachePathResolver
from domain.errors import CommandError, PathResolutionError
from domain.package_manager import get_package_manager_info
from infrastructure.subprocess_command_runner import SubprocessCommandRunner


class TestSubprocessCommandRunner:
    @patch('subprocess.run')
    def test_returns_trimmed_stdout(self, mock_run):
        mock_run.return_value = Mock(returncode=0, stdout="/home/runner/.npm\n", stderr="")
        
        result = SubprocessCommandRunner().run("npm config get cache", cwd="/work")
        
        assert result == "/home/runner/.npm"
        args, kwargs = mock_run.call_args
        assert args[0] == ["npm", "config", "get", "cache"]
        assert kwargs['cwd'] == "/work"
        assert kwargs['capture_output'] is True
        assert kwargs['text'] is True
    
    @patch('subprocess.run')
    def test_non_zero_exit_uses_stderr(self, mock_run):
        mock_run.return_value = Mock(returncode=1, stdout="", stderr="Usage Error: unknown option\n")
        
        with pytest.raises(CommandError, match="Usage Error: unknown option") as exc_info:
            SubprocessCommandRunner().run("yarn config get cacheFolder")
        
        assert exc_info.value.exit_code == 1
        assert exc_info.value.command == "yarn config get cacheFolder"
    
    @patch('subprocess.run')
    def test_non_zero_exit_without_stderr(self, mock_run):
        mock_run.return_value = Mock(returncode=2, stdout="", stderr="  \n")
        
        with pytest.raises(CommandError, match="The 'pnpm store path --silent' command failed with exit code: 2"):
            SubprocessCommandRunner().run("pnpm store path --silent")
    
    @patch('subprocess.run', side_effect=FileNotFoundError("No such file or directory: 'pnpm'"))
    def test_missing_executable(self, mock_run):
        with pytest.raises(CommandError, match="could not be run"):
            SubprocessCommandRunner().run("pnpm store path --silent")
    
    @patch('subprocess.run', side_effect=subprocess.TimeoutExpired("yarn --version", 5))
    def test_timeout(self, mock_run):
        with pytest.raises(CommandError):
            SubprocessCommandRunner(timeout=5).run("yarn --version")
        
        assert mock_run.call_args.kwargs['timeout'] == 5
    
    @patch('subprocess.run', side_effect=PermissionError(13, "Permission denied"))
    def test_not_executable(self, mock_run):
        with pytest.raises(CommandError, match="Permission denied"):
            SubprocessCommandRunner().run("npm config get cache")
    
    def test_working_directory_is_a_file(self, tmp_path):
        not_a_dir = tmp_path / "package.json"
        not_a_dir.write_text("{}")
        
        with pytest.raises(CommandError):
            SubprocessCommandRunner().run("pwd", cwd=str(not_a_dir))
    
    def test_resolver_reports_os_errors_as_path_resolution_failures(self, tmp_path):
        not_a_dir = tmp_path / "package.json"
        not_a_dir.write_text("{}")
        resolver = CachePathResolver(SubprocessCommandRunner())
        
        with pytest.raises(PathResolutionError):
            resolver.resolve(get_package_manager_info("npm"), cwd=str(not_a_dir))
    
    def test_real_command(self, tmp_path):
        assert SubprocessCommandRunner().run("pwd", cwd=str(tmp_path)) == str(tmp_path)
