import os
import platform
from dataclasses import dataclass
from typing import Mapping, Optional

from domain.cache_key import normalize_arch
from domain.hash_constants import CACHE_KEY_PREFIX

_RUNNER_OS_NAMES = {
    "linux": "Linux",
    "darwin": "macOS",
    "windows": "Windows",
}


@dataclass(frozen=True)
class RestoreSettings:
    """Process environment inputs, passed in explicitly at invocation time."""
    runner_os: str
    arch: str
    workspace: str
    key_prefix: str = CACHE_KEY_PREFIX

    @classmethod
    def from_environment(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        workspace: Optional[str] = None
    ) -> "RestoreSettings":
        environ = os.environ if environ is None else environ
        system = platform.system()
        runner_os = environ.get("RUNNER_OS") or _RUNNER_OS_NAMES.get(system.lower(), system)
        return cls(
            runner_os=runner_os,
            arch=normalize_arch(platform.machine()),
            workspace=workspace or environ.get("GITHUB_WORKSPACE") or os.getcwd()
        )


@dataclass
class RestoreOutcome:
    requested_key: str
    matched_key: Optional[str]
    hit: bool
    cache_path: str = ""


class State:
    CACHE_PRIMARY_KEY = "CACHE_KEY"
    CACHE_MATCHED_KEY = "CACHE_RESULT"
    CACHE_PATHS = "CACHE_PATHS"


class Outputs:
    CACHE_HIT = "cache-hit"
    CACHE_KEY = "cache-key"
    CACHE_MATCHED_KEY = "cache-matched-key"
