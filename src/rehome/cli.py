"""CLI entry point for rehome.

Recreates issues as a GitHub App bot using an installation token and keeps
the copies in parity with the originals. Original issues are left untouched.

Modes (at most one):
- default: create the copies and write the mapping file
- --dry-run: list what would be created
- --comments-only: replay comments using the existing mapping file
- --verify: check old/new parity (fields + comment counts)
- --clean-attribution: remove "Originally posted by" headers from replayed comments
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, NoReturn

import click

from rehome.config import (
    ConfigError,
    RehomeConfig,
    find_config,
    load_config,
    validate_repo,
)
from rehome.gateway import GatewayError, TicketGateway, TokenError, resolve_token
from rehome.logging import get_logger, setup_logging
from rehome.mapping_store import MappingStore, MappingStoreError
from rehome.orchestrator import (
    CreationError,
    MigrationOrchestrator,
    Mode,
    OrchestratorError,
)

if TYPE_CHECKING:
    from rehome.orchestrator import CreationPlan, RunResult
    from rehome.verifier import VerificationReport

logger = get_logger("cli")

EXIT_FATAL = 1
# Exit code when verification finds mismatches; every error exits with 1.
EXIT_VERIFY_FAILED = 2


class RehomeUsageError(click.UsageError):
    """Invalid invocation. Exits with 1 so that 2 only ever means failed verification."""

    exit_code = EXIT_FATAL


class RehomeCommand(click.Command):
    """Reports option parsing errors with the fatal exit code."""

    def make_context(self, *args: Any, **kwargs: Any) -> click.Context:
        try:
            return super().make_context(*args, **kwargs)
        except click.UsageError as e:
            e.exit_code = EXIT_FATAL
            raise


def _fail(message: str) -> NoReturn:
    logger.error("%s", message)
    click.echo(message, err=True)
    sys.exit(EXIT_FATAL)


def _load_config(config_path: Path | None) -> RehomeConfig:
    """Load rehome.yaml if given or found, otherwise use defaults."""
    if config_path is None:
        try:
            config_path = find_config()
        except ConfigError:
            return RehomeConfig()
    return load_config(config_path)


def _select_mode(dry_run: bool, comments_only: bool, verify: bool, clean_attribution: bool) -> Mode:
    flags = {
        Mode.DRY_RUN: dry_run,
        Mode.COMMENTS: comments_only,
        Mode.VERIFY: verify,
        Mode.CLEAN_ATTRIBUTION: clean_attribution,
    }
    chosen = [mode for mode, enabled in flags.items() if enabled]
    if len(chosen) > 1:
        raise RehomeUsageError(
            "--dry-run, --comments-only, --verify and --clean-attribution are mutually exclusive"
        )
    return chosen[0] if chosen else Mode.CREATE


def _echo_plan(
    result: RunResult, plan: CreationPlan, config: RehomeConfig, store: MappingStore
) -> None:
    if plan.nothing_to_migrate:
        excluded = ", ".join(f"#{n}" for n in sorted(config.exclude)) or "none"
        click.echo(
            f'No issues found authored by "{config.author}" to migrate (excluding {excluded}).'
        )
        return

    click.echo(
        f"Found {len(plan.selected)} issue(s) to migrate "
        f"(author={config.author}, repo={store.repo})."
    )
    if plan.already_mapped:
        click.echo(f"Already migrated (skipped): {len(plan.already_mapped)}")

    if result.mode is Mode.DRY_RUN:
        click.echo("\n--dry-run enabled. Would create:")
        for line in result.preview:
            click.echo(f"- {line}")
    elif not result.created:
        click.echo(f"\nNothing new to create. Mapping unchanged: {store.path}")
    else:
        click.echo(f"\nDone. Wrote mapping: {store.path}")
        click.echo("New issues:")
        for entry in result.created:
            click.echo(f"- #{entry.new.number}: {entry.new.url}")


def _echo_report(report: VerificationReport) -> None:
    if report.passed:
        click.echo("Verification passed: all mapped issues match (including comment counts).")
        return
    click.echo(f"Verification failed ({len(report.findings)} mismatch(es))")
    for finding in report.findings:
        click.echo(f"- {finding.describe()}")


def _echo_result(result: RunResult, config: RehomeConfig, store: MappingStore) -> None:
    if result.plan is not None:
        _echo_plan(result, result.plan, config, store)
    elif result.comment_log is not None:
        log = result.comment_log
        click.echo(f"Wrote comment migration log: {config.get_comment_log_path()}")
        click.echo(f"Comment migration complete ({log.migrated} migrated, {log.skipped} skipped).")
    elif result.report is not None:
        _echo_report(result.report)
    else:
        click.echo(f"Cleaned {result.cleaned} comment(s).")


@click.command(cls=RehomeCommand)
@click.option("--repo", help='Repository in "owner/name" form (default: from rehome.yaml)')
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to rehome.yaml (auto-detected if not specified)",
)
@click.option("--author", help="Which author login to migrate (default: finalFlick)")
@click.option(
    "--exclude",
    type=int,
    multiple=True,
    help="Issue number never to migrate; repeatable (default: 19)",
)
@click.option("--dry-run", is_flag=True, help="Print what would happen without creating anything")
@click.option(
    "--comments-only", is_flag=True, help="Only migrate comments using the existing mapping file"
)
@click.option("--verify", is_flag=True, help="Verify old/new parity (fields + comment counts)")
@click.option(
    "--clean-attribution",
    is_flag=True,
    help='Remove "Originally posted by" headers from migrated comments',
)
@click.option(
    "--report/--no-report",
    default=True,
    help="Write a JSON verification report next to the mapping file (with --verify)",
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for rehome.log (default: logs/)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.version_option(package_name="rehome")
def main(
    repo: str | None,
    config_path: Path | None,
    author: str | None,
    exclude: tuple[int, ...],
    dry_run: bool,
    comments_only: bool,
    verify: bool,
    clean_attribution: bool,
    report: bool,
    log_dir: Path | None,
    verbose: bool,
) -> None:
    """Recreate issues under a GitHub App bot identity.

    Leaves original issues untouched.
    """
    mode = _select_mode(dry_run, comments_only, verify, clean_attribution)
    setup_logging(log_dir=log_dir, level="DEBUG" if verbose else None, console=verbose)

    try:
        config = _load_config(config_path)
        if repo:
            config.repo = repo
        if author:
            config.author = author
        if exclude:
            config.exclude = list(exclude)
        owner, name = validate_repo(config.repo)
        full_name = f"{owner}/{name}"
        logger.info("rehome %s for %s (author=%s)", mode, full_name, config.author)

        store = MappingStore(config.get_mapping_path(), full_name)
        if mode.needs_mapping:
            # Fail on a missing or broken mapping before asking for a token.
            store.read()
            click.echo(f"Using mapping: {store.path}")

        token = resolve_token(full_name, config.github.token_command)
        with TicketGateway(
            full_name,
            token,
            base_url=config.github.api_url,
            page_size=config.github.page_size,
            timeout=config.github.timeout,
        ) as gateway:
            orchestrator = MigrationOrchestrator(
                gateway,
                store,
                author=config.author,
                exclusions=config.exclude,
                web_url=config.github.web_url,
            )
            orchestrator.progress = click.echo
            result = orchestrator.run(
                mode,
                comment_log_path=config.get_comment_log_path(),
                report_path=config.get_report_path() if report else None,
            )

    except ConfigError as e:
        _fail(f"Configuration error: {e}")
    except MappingStoreError as e:
        _fail(f"Mapping error: {e}")
    except TokenError as e:
        _fail(f"Authentication error: {e}")
    except CreationError as e:
        _fail(
            f"Creation error: {e}\n"
            f"Tickets created before the failure are recorded in {config.get_mapping_path()}; "
            "re-running skips them."
        )
    except OrchestratorError as e:
        _fail(f"Migration error: {e}")
    except GatewayError as e:
        _fail(f"GitHub error: {e}")

    _echo_result(result, config, store)
    if result.report is not None and not result.report.passed:
        logger.warning("Verification failed with %d finding(s)", len(result.report.findings))
        sys.exit(EXIT_VERIFY_FAILED)
