"""Configuration loading for rehome."""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILE_NAME = "rehome.yaml"

DEFAULT_AUTHOR = "finalFlick"
# Already a bot-authored thread; never migrated.
DEFAULT_EXCLUDE = (19,)


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


def validate_repo(repo: str | None) -> tuple[str, str]:
    """Split an "owner/name" repository identifier.

    Raises:
        ConfigError: If the identifier is missing or malformed
    """
    if not repo:
        raise ConfigError("No repository given. Pass --repo owner/name or set 'repo' in rehome.yaml")
    parts = repo.split("/")
    if len(parts) != 2 or not all(p.strip() for p in parts):
        raise ConfigError(f'Invalid repo. Expected "owner/name", got "{repo}"')
    return parts[0], parts[1]


@dataclass
class PathsConfig:
    """Where artifacts are written.

    Relative paths are resolved against the directory holding rehome.yaml
    (or the working directory when there is no config file). File names
    are relative to ``secrets_dir``.
    """

    secrets_dir: str = ".secrets"
    mapping_file: str = "issue-migration-map.json"
    comment_log_file: str = "issue-comment-migration-log.json"
    verification_report_file: str = "issue-verification-report.json"


@dataclass
class GitHubConfig:
    """GitHub endpoints and access."""

    api_url: str = "https://api.github.com"
    web_url: str = "https://github.com"
    page_size: int = 100
    timeout: float = 30.0
    token_command: list[str] | None = None


@dataclass
class RehomeConfig:
    """rehome configuration."""

    repo: str | None = None
    author: str = DEFAULT_AUTHOR
    exclude: list[int] = field(default_factory=lambda: list(DEFAULT_EXCLUDE))
    paths: PathsConfig = field(default_factory=PathsConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    root_path: Path = field(default_factory=Path.cwd)

    @classmethod
    def from_dict(cls, data: dict[str, Any], root_path: Path) -> RehomeConfig:
        """Create config from dictionary.

        Args:
            data: Configuration dictionary from YAML.
            root_path: Root directory containing the config file.

        Returns:
            Parsed configuration object.

        Raises:
            ConfigError: If a value has the wrong type.
        """
        paths_data = _section(data, "paths")
        github_data = _section(data, "github")

        exclude = data.get("exclude", list(DEFAULT_EXCLUDE))
        if not isinstance(exclude, list) or not all(
            isinstance(n, int) and not isinstance(n, bool) for n in exclude
        ):
            raise ConfigError("'exclude' must be a list of issue numbers")

        token_command = github_data.get("token_command")
        if isinstance(token_command, str):
            token_command = shlex.split(token_command)
        elif token_command is not None and not (
            isinstance(token_command, list) and all(isinstance(a, str) for a in token_command)
        ):
            raise ConfigError("'github.token_command' must be a string or a list of strings")

        try:
            github = GitHubConfig(
                api_url=str(github_data.get("api_url", GitHubConfig.api_url)),
                web_url=str(github_data.get("web_url", GitHubConfig.web_url)),
                page_size=int(github_data.get("page_size", GitHubConfig.page_size)),
                timeout=float(github_data.get("timeout", GitHubConfig.timeout)),
                token_command=token_command,
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid 'github' settings: {e}") from e
        if not 1 <= github.page_size <= 100:
            raise ConfigError("'github.page_size' must be between 1 and 100")

        paths = PathsConfig(
            secrets_dir=str(paths_data.get("secrets_dir", PathsConfig.secrets_dir)),
            mapping_file=str(paths_data.get("mapping_file", PathsConfig.mapping_file)),
            comment_log_file=str(paths_data.get("comment_log_file", PathsConfig.comment_log_file)),
            verification_report_file=str(
                paths_data.get("verification_report_file", PathsConfig.verification_report_file)
            ),
        )

        return cls(
            repo=data.get("repo"),
            author=str(data.get("author", DEFAULT_AUTHOR)),
            exclude=exclude,
            paths=paths,
            github=github,
            root_path=root_path,
        )

    def get_secrets_dir(self) -> Path:
        return self.root_path / self.paths.secrets_dir

    def get_mapping_path(self) -> Path:
        return self.get_secrets_dir() / self.paths.mapping_file

    def get_comment_log_path(self) -> Path:
        return self.get_secrets_dir() / self.paths.comment_log_file

    def get_report_path(self) -> Path:
        return self.get_secrets_dir() / self.paths.verification_report_file


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(value).__name__}")
    return value


def load_config(config_path: Path | str) -> RehomeConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to rehome.yaml file.

    Returns:
        Parsed configuration object.

    Raises:
        ConfigError: If file doesn't exist or is invalid.
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8-sig") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a YAML mapping, got {type(data).__name__}")

    return RehomeConfig.from_dict(data, config_path.parent.resolve())


def find_config(start_path: Path | str | None = None) -> Path:
    """Find rehome.yaml by walking up directory tree.

    Args:
        start_path: Starting directory. Defaults to current directory.

    Returns:
        Path to rehome.yaml file.

    Raises:
        ConfigError: If no config file is found.
    """
    start_path = Path.cwd() if start_path is None else Path(start_path)
    current = start_path.resolve()

    for directory in (current, *current.parents):
        config_path = directory / CONFIG_FILE_NAME
        if config_path.exists():
            return config_path

    raise ConfigError(f"No {CONFIG_FILE_NAME} found in {start_path} or any parent directory")
