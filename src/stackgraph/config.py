"""Load stackgraph configuration"""

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import toml

from .config_classes import DEFAULT_STACK, ApiConfig, FunctionConfig, ProjectConfig
from .exceptions import ConfigError, UserResolvableError
from .naming import StackContext

LOG = logging.getLogger(__name__)

STACKGRAPH_DIST_DATA = Path(__file__).parent / "dist_data"
DEFAULT_CONFIG_FILEPATH = Path("stackgraph.toml")
STACK_ENV_VAR = "STACKGRAPH_STACK"


@dataclass
class Config:
    root: Path
    config_file: Union[Path, None]
    stack: str
    project: ProjectConfig
    function: FunctionConfig = field(default_factory=FunctionConfig)
    api: ApiConfig = field(default_factory=ApiConfig)

    @property
    def context(self) -> StackContext:
        return StackContext(stack=self.stack, project=self.project.name)


def relative_root_path(path: Path, cwd: Path = None) -> Path:
    """Resolve PATH relative to the parent of the working directory"""
    path = Path(path)
    if path.is_absolute():
        return path
    cwd = Path.cwd() if cwd is None else Path(cwd)
    return cwd.parent / path


def get_stack_name(args: dict) -> str:
    return args.get("--stack") or os.environ.get(STACK_ENV_VAR) or DEFAULT_STACK


def from_dict(data: dict, stack: str, root: Path = None, config_file=None) -> Config:
    """Build a Config from parsed TOML data"""
    data = dict(data)

    if "project" not in data:
        raise ConfigError(
            f"No [project] section in {config_file or 'configuration'}",
            "Add one with at least a name, e.g.:\n\n[project]\nname = \"todos\"",
        )

    try:
        project = ProjectConfig(**data.pop("project"))
        function = FunctionConfig(**data.pop("function", {}))
        api = ApiConfig(**data.pop("api", {}))
    except TypeError as exc:
        raise ConfigError(
            f"Bad configuration in {config_file or 'configuration'}: {exc}",
            "Check the keys against the skeleton created by `stackgraph init'.",
        ) from exc

    for key in data:
        LOG.warning("Ignoring unknown config section [%s]", key)

    # Fail early on a bad stack or project name
    StackContext(stack=stack, project=project.name)

    return Config(
        root=root or Path.cwd(),
        config_file=config_file,
        stack=stack,
        project=project,
        function=function,
        api=api,
    )


def load(args: dict) -> Config:
    """Load the configuration file named in ARGS"""
    if args.get("--config"):
        config_file = Path(args["--config"])
    else:
        config_file = DEFAULT_CONFIG_FILEPATH

    try:
        data = toml.load(config_file)
    except FileNotFoundError:
        raise ConfigError(
            f"{config_file} not found",
            "Either create it manually, or use `stackgraph init' to generate a new one.",
        )
    except toml.TomlDecodeError as exc:
        raise ConfigError(f"Could not parse {config_file}: {exc}", "Fix the syntax.")

    LOG.info("Loaded %s", config_file)
    return from_dict(
        data,
        stack=get_stack_name(args),
        root=config_file.parent.resolve(),
        config_file=config_file,
    )


def create_skeleton(dest="."):
    """Create a skeleton (template) config file in the given dir"""
    filename = Path(dest) / DEFAULT_CONFIG_FILEPATH
    if filename.exists():
        raise UserResolvableError(
            f"{filename} already exists", "Cowardly refusing to clobber it...",
        )
    shutil.copyfile(STACKGRAPH_DIST_DATA / DEFAULT_CONFIG_FILEPATH, filename)
    return filename
