"""
Configuration for branchtree.

Settings come from defaults, then a `branchtree.toml` file or the
`[tool.branchtree]` table of `pyproject.toml`, then command-line overrides.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from branchtree.exceptions import ConfigurationError
from branchtree.naming.policy import NamingPolicy

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "branchtree.toml"
PYPROJECT_NAME = "pyproject.toml"
DEFAULT_SOLIDITY_VERSION = "0.8.0"


class BranchtreeConfig(BaseModel):
    """
    Settings shared by scaffolding and checking.

    Params:
        solidity_version: Version written into the pragma directive
        indent: Width of one indentation unit in generated code
        emit_vm_skip: Add `vm.skip(true);` to every generated test body
        format_output: Pipe generated and patched code through `forge fmt`
        source_suffix: Suffix of the test file paired with a tree file
        strict: Treat warnings as failures when checking
        max_workers: Worker threads for batch runs (None for the executor default)
        naming: Test-function naming policy
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    solidity_version: str = DEFAULT_SOLIDITY_VERSION
    indent: int = Field(default=2, ge=1, le=8)
    emit_vm_skip: bool = False
    format_output: bool = False
    source_suffix: str = ".t.sol"
    strict: bool = False
    max_workers: int | None = Field(default=None, ge=1)
    naming: NamingPolicy = Field(default_factory=NamingPolicy)

    def with_overrides(self, **overrides: Any) -> "BranchtreeConfig":
        """Return a copy with every non-None override applied."""
        updates = {key: value for key, value in overrides.items() if value is not None}
        if not updates:
            return self
        return BranchtreeConfig.model_validate({**self.model_dump(), **updates})


def _read_table(path: Path) -> dict[str, Any] | None:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(str(path), str(e)) from e

    if path.name == PYPROJECT_NAME:
        return data.get("tool", {}).get("branchtree")
    return data


def load_config(root: Path | None = None, config_path: Path | None = None) -> BranchtreeConfig:
    """
    Load configuration from an explicit file or from the project root.

    Params:
        root: Directory searched for `branchtree.toml`, then `pyproject.toml`
            (defaults to the working directory)
        config_path: Explicit configuration file; must exist

    Returns:
        The validated configuration (defaults when no file provides a table)

    Raises:
        ConfigurationError: When a file is unreadable, malformed or invalid
    """
    if config_path is not None:
        if not config_path.is_file():
            raise ConfigurationError(str(config_path), "file does not exist")
        candidates = [config_path]
    else:
        base = root if root is not None else Path.cwd()
        candidates = [base / DEFAULT_CONFIG_NAME, base / PYPROJECT_NAME]

    for path in candidates:
        table = _read_table(path)
        if table is None:
            continue
        try:
            config = BranchtreeConfig.model_validate(table)
        except ValidationError as e:
            raise ConfigurationError(str(path), str(e)) from e
        logger.debug("loaded configuration from %s", path)
        return config

    return BranchtreeConfig()
