"""Deterministic resource names"""

import re
from dataclasses import dataclass
from typing import Union

from .exceptions import ConfigError

# Names end up in Terraform addresses as well as AWS resource names
NAME_PART_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_-]*")


def _check_part(label, value):
    if not isinstance(value, str) or not NAME_PART_RE.fullmatch(value):
        raise ConfigError(
            f"Invalid {label} name: {value!r}",
            f"The {label} name must start with a letter or underscore, and "
            "contain only letters, digits, underscores and hyphens.",
        )


def name(stack: str, project: str, logical: Union[str, None] = None) -> str:
    """Get the resource name for LOGICAL in this stack and project.

    With no logical name, this is the stack prefix itself, e.g. "dev-todos".
    Otherwise the logical name is appended: "dev-todos-createTodo". Callers must
    pick logical names that don't collide.

    """
    _check_part("stack", stack)
    _check_part("project", project)
    prefix = f"{stack}-{project}"
    return f"{prefix}-{logical}" if logical else prefix


@dataclass(frozen=True)
class StackContext:
    """The deployment environment: which stack of which project"""

    stack: str
    project: str

    def __post_init__(self):
        _check_part("stack", self.stack)
        _check_part("project", self.project)

    def name(self, logical: Union[str, None] = None) -> str:
        return name(self.stack, self.project, logical)

    @property
    def tags(self) -> dict:
        return {"Environment": self.stack}
