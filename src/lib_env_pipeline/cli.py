"""CLI adapter for ``lib_env_pipeline`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators check how one environment variable resolves under a given policy
without writing Python code, e.g. to debug a container that refuses to start.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command that wires global traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`cli_read` – runs one pipeline and prints the outcome as JSON.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer and only talks to the composition root
(:func:`lib_env_pipeline.core.get`). Pipeline errors are logged with
``env_variable_rejected`` and re-raised; ``lib_cli_exit_tools`` prints them
and picks the exit code.
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from typing import Callable, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .core import EnvError, Raw, Valid, get
from .observability import log_error, log_info

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

POLICY_CHOICES: Final[tuple[str, ...]] = ("required", "optional", "default")
_CONVERTERS: Final[dict[str, Callable[[str], object]]] = {"str": str, "int": int, "float": float}


def _resolve_version() -> str:
    """Return the installed package version, or ``"0.0.0"`` when running from a checkout."""

    try:
        return metadata.version("lib_env_pipeline")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Typed environment variable pipeline",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_env_pipeline",
    message="lib_env_pipeline version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command configuring traceback handling for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_env_pipeline")
    except metadata.PackageNotFoundError:
        click.echo("lib_env_pipeline (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_env_pipeline')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("read", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("key")
@click.option(
    "--policy",
    type=click.Choice(POLICY_CHOICES, case_sensitive=False),
    default="required",
    show_default=True,
    help="How to treat an unset variable",
)
@click.option(
    "--checked/--unchecked",
    default=True,
    show_default=True,
    help="Reject invalid unicode instead of repairing it",
)
@click.option("--default", "default", default=None, help="Value used when the variable is unset (policy=default)")
@click.option(
    "--substitute-invalid",
    is_flag=True,
    default=False,
    help="With --policy default --unchecked, use the default for invalid unicode too",
)
@click.option(
    "--as",
    "as_type",
    type=click.Choice(tuple(_CONVERTERS), case_sensitive=False),
    default="str",
    show_default=True,
    help="Convert the value before printing it",
)
@click.option("--indent", type=int, default=None, help="Pretty-print JSON output with the provided indent size")
def cli_read(
    key: str,
    policy: str,
    checked: bool,
    default: Optional[str],
    substitute_invalid: bool,
    as_type: str,
    indent: Optional[int],
) -> None:
    """Resolve KEY under the selected policy and print the result as JSON.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> runner = CliRunner()
    >>> result = runner.invoke(cli, ["read", "PORT", "--as", "int"], env={"PORT": "9090"})
    >>> json.loads(result.output)["value"]
    9090
    """

    policy = policy.lower()
    _validate_read_options(policy, checked, default, substitute_invalid)
    raw = get(key)
    present = raw.raw is not None
    try:
        valid = _resolve(raw, policy, checked, default, substitute_invalid)
        value = None if valid is None else valid.then_try_fromstr_into(_CONVERTERS[as_type.lower()]).into_inner()
    except EnvError as exc:
        log_error("env_variable_rejected", key=key, policy=policy, checked=checked, kind=exc.kind.value)
        raise
    log_info("env_variable_resolved", key=key, policy=policy, checked=checked, present=present)
    click.echo(_render({"key": key, "present": present, "value": value}, indent))


def _render(payload: dict[str, object], indent: Optional[int]) -> str:
    """Serialise *payload* as strict JSON; NaN and infinities have no JSON form."""

    try:
        return json.dumps(payload, indent=indent, allow_nan=False)
    except ValueError as exc:
        raise click.ClickException(f"value of `{payload['key']}` is not representable as JSON: {payload['value']!r}") from exc


def _validate_read_options(policy: str, checked: bool, default: Optional[str], substitute_invalid: bool) -> None:
    """Reject option combinations that do not map onto a pipeline operation."""

    if policy == "default" and default is None:
        raise click.UsageError("--policy default requires --default")
    if policy != "default" and default is not None:
        raise click.UsageError("--default only applies to --policy default")
    if substitute_invalid and (policy != "default" or checked):
        raise click.UsageError("--substitute-invalid requires --policy default --unchecked")


def _resolve(
    raw: Raw,
    policy: str,
    checked: bool,
    default: Optional[str],
    substitute_invalid: bool,
) -> Optional[Valid]:
    """Dispatch to the :class:`Raw` terminal operation matching the CLI options."""

    if policy == "required":
        return raw.required_checked() if checked else raw.required_unchecked()
    if policy == "optional":
        return raw.optional_checked() if checked else raw.optional_unchecked()
    if default is None:
        raise click.UsageError("--policy default requires --default")
    if checked:
        return raw.with_default_checked(default)
    if substitute_invalid:
        return raw.with_default_unchecked_sub_invalid(default)
    return raw.with_default_unchecked(default)


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_env_pipeline",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
