"""CLI entry point for laggy."""

from __future__ import annotations

import json
import logging
import os
import subprocess
import sys
from typing import Any, Callable

import click

from laggy import __version__
from laggy.config import ENV_VAR, encode_config, resolve_config
from laggy.interceptor import ChaosInterceptor, describe_decision
from laggy.log import configure_logging
from laggy.models import LaggyConfig
from laggy.observer import InterceptRecorder
from laggy.presets import ConfigError, UnknownPresetError, describe_preset, list_presets

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _parse_fail_codes(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> list[int] | None:
    if value is None:
        return None
    try:
        codes = [int(part.strip()) for part in value.split(",") if part.strip()]
    except ValueError:
        raise click.BadParameter(f"expected comma-separated integers, got '{value}'") from None
    if not codes:
        raise click.BadParameter("at least one code is required")
    return codes


def _chaos_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options shared by every command that builds a config."""
    options = [
        click.option("--preset", default=None, metavar="NAME", help="Use a network preset."),
        click.option(
            "--latency", "latency_ms", type=click.IntRange(min=0), default=None,
            help="Base latency in milliseconds.",
        ),
        click.option(
            "--jitter", "jitter_ms", type=click.IntRange(min=0), default=None,
            help="Random latency variance +/- in milliseconds.",
        ),
        click.option(
            "--fail-rate", type=float, default=None,
            help="Fraction of requests that fail (0-1).",
        ),
        click.option(
            "--fail-codes", callback=_parse_fail_codes, default=None, metavar="CODES",
            help="Comma-separated failure status codes; 0 means network error.",
        ),
        click.option(
            "--timeout-rate", type=float, default=None,
            help="Fraction of requests that hang (0-1).",
        ),
        click.option(
            "--timeout-ms", type=click.IntRange(min=0), default=None,
            help="How long a hanging request is held, in milliseconds.",
        ),
        click.option(
            "--include", multiple=True, metavar="PATTERN",
            help="Only affect URLs matching PATTERN (* wildcard). Repeatable.",
        ),
        click.option(
            "--exclude", multiple=True, metavar="PATTERN",
            help="Never affect URLs matching PATTERN (* wildcard). Repeatable.",
        ),
        click.option("--seed", type=int, default=None, help="Seed for reproducible randomness."),
        click.option("--verbose", is_flag=True, help="Log every intercepted request."),
        click.option("--silent", is_flag=True, help="Suppress laggy output."),
        click.option(
            "--config", "config_file", type=click.Path(dir_okay=False), default=None,
            metavar="PATH", help="YAML or JSON file with settings.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_config(preset: str | None, config_file: str | None, **options: Any) -> LaggyConfig:
    """Resolve options into a config, exiting with status 1 on user error."""
    overrides: dict[str, Any] = {}
    for key, value in options.items():
        # unset flags and empty repeatable options leave file/preset values alone
        if value is None or value is False or value == ():
            continue
        overrides[key] = list(value) if isinstance(value, tuple) else value
    try:
        return resolve_config(preset=preset, overrides=overrides, config_file=config_file)
    except UnknownPresetError as exc:
        click.echo(f"Error: {exc}", err=True)
        click.echo("Run `laggy presets` to see available presets.", err=True)
        sys.exit(1)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


def _log_summary(config: LaggyConfig, preset: str | None) -> None:
    if preset:
        logger.info("Using preset: %s", preset)
    if config.latency_ms > 0 or config.jitter_ms > 0:
        logger.info("Latency: %dms (±%dms)", config.latency_ms, config.jitter_ms)
    if config.fail_rate > 0:
        logger.info("Failure rate: %.0f%%", config.fail_rate * 100)
    if config.timeout_rate > 0:
        logger.info("Timeout rate: %.0f%%", config.timeout_rate * 100)
    if config.seed is not None:
        logger.info("Seed: %d", config.seed)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="laggy")
def main() -> None:
    """laggy — simulate bad networks. Break your app before users do."""


@main.command(
    "run",
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)
@_chaos_options
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
def run_command(
    command: tuple[str, ...], preset: str | None, config_file: str | None, **options: Any
) -> None:
    """Run COMMAND with chaos settings published in LAGGY_CONFIG.

    Python code in the child process opts in by mounting a laggy transport,
    e.g. ``ChaosTransport(ChaosInterceptor.from_environ())``.
    """
    config = _build_config(preset, config_file, **options)
    configure_logging(verbose=config.verbose, silent=config.silent)
    _log_summary(config, preset)
    logger.info("Running: %s", " ".join(command))

    env = dict(os.environ)
    env[ENV_VAR] = encode_config(config)
    try:
        returncode = subprocess.call(list(command), env=env)
    except OSError as exc:
        logger.error("Failed to start command: %s", exc)
        sys.exit(1)
    sys.exit(returncode if returncode >= 0 else 1)


@main.command("presets")
@click.option("--json-output", is_flag=True, help="Emit presets as JSON.")
def presets_command(json_output: bool) -> None:
    """List the available network presets."""
    presets = list_presets()
    if json_output:
        click.echo(json.dumps([p.model_dump(exclude_none=True) for p in presets], indent=2))
        return

    click.echo("\nAvailable presets:\n")
    for preset in presets:
        click.echo(f"  {preset.name:<12} {preset.description}")
        details = describe_preset(preset)
        if details:
            click.echo(f"               {details}")
    click.echo("")


@main.command("decide")
@_chaos_options
@click.argument("url")
@click.option("--method", default="GET", show_default=True, help="Request method.")
@click.option("--count", default=1, show_default=True, type=click.IntRange(min=1),
              help="Number of consecutive requests to evaluate.")
@click.option("--json-output", is_flag=True, help="Emit decisions as JSON.")
def decide_command(
    url: str,
    method: str,
    count: int,
    json_output: bool,
    preset: str | None,
    config_file: str | None,
    **options: Any,
) -> None:
    """Show the decisions laggy would take for COUNT requests to URL.

    Nothing is sent and nothing sleeps.  Pass --seed to get the same
    sequence as a real run with that seed.
    """
    config = _build_config(preset, config_file, **options)
    configure_logging(verbose=config.verbose, silent=config.silent)
    # summary must cover every listed decision
    interceptor = ChaosInterceptor(config, recorder=InterceptRecorder(max_records=None))
    decisions = [interceptor.evaluate(url, method.upper()) for _ in range(count)]

    if json_output:
        click.echo(
            json.dumps(
                {
                    "decisions": [d.model_dump(mode="json") for d in decisions],
                    "summary": interceptor.recorder.summary(),
                },
                indent=2,
            )
        )
        return

    for index, decision in enumerate(decisions, start=1):
        click.echo(f"{index:>4}  {method.upper()} {url} → {describe_decision(decision)}")
    summary = interceptor.recorder.summary()
    click.echo(
        "\nSummary: "
        + ", ".join(f"{key}={value}" for key, value in summary.items())
    )


if __name__ == "__main__":
    main()
