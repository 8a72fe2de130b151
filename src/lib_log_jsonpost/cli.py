"""Click command line interface for inspecting and exercising the shipper.

Purpose
-------
Give operators a quick way to check a field configuration (``preview``) and
to send a single event to an endpoint and wait for the delivery (``send``).

Contents
--------
* :func:`cli` - root group with ``--traceback`` and ``--use-dotenv`` toggles.
* ``info`` / ``preview`` / ``send`` commands.
* :func:`main` - entry point running the group through ``lib_cli_exit_tools``.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Sequence

import click
import lib_cli_exit_tools
from rich.console import Console

from . import __init__conf__
from . import config as dotenv_config
from . import runtime
from .adapters.layout import TemplateLayout
from .application.use_cases.build_document import DocumentBuilder
from .domain.errors import ConfigurationError, DeliveryError
from .domain.events import LogEvent, next_sequence_id
from .domain.fields import FieldSpec
from .domain.levels import LogLevel, coerce_level
from .domain.policy import FailurePolicy

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

_LEVEL_CHOICES = click.Choice([level.name for level in LogLevel], case_sensitive=False)
_DEFAULT_FIELDS = ("timestamp", "level", "loggername", "message", "properties")


def _parse_properties(values: Sequence[str]) -> dict[str, str]:
    properties: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected KEY=VALUE, got {item!r}", param_hint="--property")
        properties[key.strip()] = value
    return properties


def _parse_field_options(values: Sequence[str]) -> tuple[FieldSpec, ...]:
    try:
        return tuple(FieldSpec.parse(value) for value in (values or _DEFAULT_FIELDS))
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--field") from exc


def _build_event(message: str, level: str, logger_name: str, properties: Sequence[str]) -> LogEvent:
    return LogEvent(
        level=coerce_level(level),
        message=message,
        timestamp=datetime.now(timezone.utc),
        logger_name=logger_name,
        sequence_id=next_sequence_id(),
        properties=_parse_properties(properties),
    )


def _field_options(command):
    command = click.option(
        "--property",
        "properties",
        multiple=True,
        metavar="KEY=VALUE",
        help="Open property attached to the sample event (repeatable).",
    )(command)
    command = click.option("--logger", "logger_name", default="lib_log_jsonpost.cli", show_default=True)(command)
    command = click.option("--level", type=_LEVEL_CHOICES, default="INFO", show_default=True)(command)
    command = click.option("--message", default="Hello from lib_log_jsonpost", show_default=True)(command)
    command = click.option(
        "--field",
        "fields",
        multiple=True,
        metavar="NAME[=TEMPLATE]",
        help="Output field (repeatable). Defaults to timestamp, level, loggername, message, properties.",
    )(command)
    return command


@click.group(
    help=__init__conf__.title,
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=True,
)
@click.version_option(
    version=__init__conf__.version,
    prog_name=__init__conf__.shell_command,
    message=f"{__init__conf__.shell_command} version {__init__conf__.version}",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=None,
    help="Load LOG_JSONPOST_* variables from the nearest .env file.",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool, use_dotenv: bool | None) -> None:
    """Root command storing global flags."""

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback

    env_toggle = os.getenv(dotenv_config.DOTENV_ENV_VAR)
    if dotenv_config.should_use_dotenv(explicit=use_dotenv, env_value=env_toggle):
        dotenv_config.enable_dotenv()

    if ctx.invoked_subcommand is None:
        click.echo(__init__conf__.summary_info(), nl=False)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print resolved metadata so users can inspect installation details."""

    click.echo(__init__conf__.summary_info(), nl=False)


@cli.command("preview", context_settings=CLICK_CONTEXT_SETTINGS)
@_field_options
def cli_preview(fields: Sequence[str], message: str, level: str, logger_name: str, properties: Sequence[str]) -> None:
    """Render the JSON document a sample event would produce."""

    builder = DocumentBuilder(_parse_field_options(fields), layout_factory=TemplateLayout)
    event = _build_event(message, level, logger_name, properties)
    try:
        payload = builder.build(event)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc
    Console().print_json(payload)


@cli.command("send", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--url", envvar="LOG_JSONPOST_URL", required=True, help="Destination URL template.")
@_field_options
@click.option(
    "--throw-on-failure/--ignore-failed-status",
    default=False,
    help="Treat non-2xx responses as failures.",
)
@click.option("--timeout", type=float, default=30.0, show_default=True, help="Request timeout in seconds.")
@click.option("--drain-timeout", type=float, default=30.0, show_default=True, help="Seconds to wait for the delivery.")
def cli_send(
    url: str,
    fields: Sequence[str],
    message: str,
    level: str,
    logger_name: str,
    properties: Sequence[str],
    throw_on_failure: bool,
    timeout: float,
    drain_timeout: float,
) -> None:
    """Post one sample event to URL and wait until it has been delivered."""

    failures: list[BaseException] = []

    def record_failure(error: DeliveryError) -> None:
        failures.append(error)

    def record_dispatch(error: BaseException | None) -> None:
        if error is not None:
            failures.append(error)

    spec_list = _parse_field_options(fields)
    event = _build_event(message, level, logger_name, properties)
    runtime.init(
        runtime.JsonPostConfig(
            url=url,
            fields=spec_list,
            throw_exceptions_on_failed_post=throw_on_failure,
            timeout=timeout,
            failure_policy=FailurePolicy.CALLBACK,
            on_failure=record_failure,
            shutdown_timeout=drain_timeout,
        )
    )
    destination = runtime.inspect_runtime().url
    try:
        runtime.write(event, record_dispatch)
        runtime.flush(drain_timeout)
    except TimeoutError as exc:
        failures.append(exc)
    finally:
        runtime.shutdown()

    if failures:
        for failure in failures:
            click.echo(f"error: {failure}", err=True)
        raise SystemExit(1)
    click.echo(f"delivered 1 event to {TemplateLayout(destination).render(event)}")


def main(argv: Sequence[str] | None = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI via ``lib_cli_exit_tools`` and return the exit code.

    Traceback preferences changed by ``--traceback`` are restored afterwards
    unless ``restore_traceback`` is ``False``.
    """

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        return lib_cli_exit_tools.run_cli(
            cli,
            argv=list(argv) if argv is not None else None,
            prog_name=__init__conf__.shell_command,
        )
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


__all__ = ["cli", "main"]
