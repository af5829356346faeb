"""Project configuration loading (JSON config file)."""

from __future__ import annotations

import json
import logging
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger(__name__)

CONFIG_TEMPLATE = """\
{
 "name":   "project",
 "github": "user/project",
 "input":  "include/lib",
 "prefix": "lib_",
 "output": "docs"
}
"""


class ConfigError(RuntimeError):
    """Raised when the configuration file is missing or invalid."""


class ProjectConfig(BaseModel):
    """Settings read from the project's JSON config file.

    ``legacy`` overrides options for historical revisions:
    ``{"input": {"src/include": ["v0.1", "v0.2*"]}}`` makes ``input`` resolve
    to ``src/include`` for ``v0.1`` and every revision matching ``v0.2*``.
    """

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    github: str | None = None
    input: str | None = None
    prefix: str | None = None
    output: str | None = None
    branch: str | None = None
    examples: str | None = None
    legacy: dict[str, dict[str, list[str]]] = {}

    project_dir: Path = Path(".")

    def option_for(self, revision: str, option: str, default: Any = None) -> Any:
        """Resolve *option* for *revision*, honouring legacy overrides."""
        for value, revisions in self.legacy.get(option, {}).items():
            if any(r == revision or fnmatchcase(revision, r) for r in revisions):
                return value
        current = getattr(self, option, None)
        return current if current is not None else default

    @property
    def output_dir(self) -> Path:
        return self.project_dir / (self.output or "docs")


def load_config(config_path: str | Path) -> ProjectConfig:
    """Load and validate a JSON config file.

    The directory holding the config file is the project directory.

    Raises:
        ConfigError: if the file is missing, unreadable or invalid.
    """
    path = Path(config_path)
    if not path.is_file():
        msg = f"You need to specify a valid config file: {path}"
        raise ConfigError(msg)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        msg = f"Could not read config file {path}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"Config file {path} must contain a JSON object"
        raise ConfigError(msg)

    data["project_dir"] = path.resolve().parent
    try:
        config = ProjectConfig.model_validate(data)
    except ValidationError as exc:
        msg = f"Invalid config file {path}: {exc}"
        raise ConfigError(msg) from exc
    logger.debug("Loaded config from %s", path)
    return config


def write_template(path: str | Path) -> None:
    """Write a starter config file."""
    Path(path).write_text(CONFIG_TEMPLATE, encoding="utf-8")
