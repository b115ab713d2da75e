"""Access token acquisition for the Ticket Gateway.

Tokens come either from an external command (for example a helper that
exchanges GitHub App credentials for a short-lived installation token and
prints it) or from the environment.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence

from rehome.gateway.exceptions import TokenError
from rehome.logging import sanitize_for_log

logger = logging.getLogger("rehome.gateway.auth")

TOKEN_ENV_VARS = ("REHOME_TOKEN", "GH_TOKEN", "GITHUB_TOKEN")


def run_token_command(command: Sequence[str], repo: str) -> str:
    """Run a token helper command and return the token it prints.

    ``{repo}`` in any argument is replaced with the repository name.

    Raises:
        TokenError: If the command fails or prints nothing
    """
    argv = [arg.replace("{repo}", repo) for arg in command]
    logger.info("Requesting access token via %s", argv[0])
    try:
        result = subprocess.run(
            argv,
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as e:
        raise TokenError(f"Token command not found: {argv[0]}") from e
    except subprocess.CalledProcessError as e:
        stderr = sanitize_for_log((e.stderr or "").strip())
        message = f"Command failed: {' '.join(argv)}\n\nexit code: {e.returncode}"
        if stderr:
            message += f"\n\nstderr:\n{stderr}"
        raise TokenError(message) from e

    token = result.stdout.strip()
    if not token:
        raise TokenError("Failed to obtain installation token (empty output).")
    return token


def resolve_token(
    repo: str,
    token_command: Sequence[str] | None = None,
    env: Mapping[str, str] | None = None,
) -> str:
    """Find an access token for the repository.

    Args:
        repo: GitHub repo in "owner/repo" format
        token_command: Optional helper command printing a token
        env: Environment to read (defaults to os.environ)

    Returns:
        The token

    Raises:
        TokenError: If no token source is available
    """
    if token_command:
        return run_token_command(token_command, repo)

    env = os.environ if env is None else env
    for name in TOKEN_ENV_VARS:
        value = env.get(name, "").strip()
        if value:
            logger.debug("Using access token from $%s", name)
            return value

    raise TokenError(
        "Missing GitHub credentials. Provide either:\n"
        "- github.token_command in rehome.yaml (prints an installation token)\n"
        f"- or one of the environment variables: {', '.join(TOKEN_ENV_VARS)}"
    )
