"""Stackgraph configuration data, usually stored in stackgraph.toml"""

from dataclasses import dataclass
from pathlib import Path

# Constants
DEFAULT_STACK = "dev"
DEFAULT_RUNTIME = "nodejs12.x"
DEFAULT_HANDLER = "functions/create.create"
DEFAULT_CODE_ARCHIVE = "build/archive.zip"
DEFAULT_LAYER_ARCHIVE = "layers/archive.zip"
DEFAULT_PATH_PART = "{new}"


@dataclass(frozen=True)
class ProjectConfig:
    name: str


@dataclass(unsafe_hash=True)
class FunctionConfig:
    runtime: str = DEFAULT_RUNTIME
    handler: str = DEFAULT_HANDLER
    memory: int = 128
    code_archive: Path = Path(DEFAULT_CODE_ARCHIVE)
    layer_archive: Path = Path(DEFAULT_LAYER_ARCHIVE)

    def __post_init__(self):
        # ensure some keys are paths
        for key in ["code_archive", "layer_archive"]:
            setattr(self, key, Path(getattr(self, key)))


@dataclass(frozen=True)
class ApiConfig:
    path_part: str = DEFAULT_PATH_PART
