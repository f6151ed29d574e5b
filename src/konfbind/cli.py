"""``konfbind`` developer CLI — inspect and exercise record bindings."""

from __future__ import annotations

import dataclasses
import importlib
import json
from typing import Any

import click
from pydantic import BaseModel

from konfbind import __version__
from konfbind.binding.shapes import is_record_type
from konfbind.config.logging import configure_logging
from konfbind.config.settings import KonfbindSettings
from konfbind.errors import KonfbindError
from konfbind.store import Store


def load_target(spec: str) -> Any:
    """Import ``module:attr`` (attr may be dotted)."""
    module_name, sep, attr_path = spec.partition(":")
    if not sep or not module_name or not attr_path:
        msg = f"expected MODULE:ATTR, got {spec!r}"
        raise click.BadParameter(msg)
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        msg = f"cannot import {module_name!r}: {exc}"
        raise click.BadParameter(msg) from exc
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            msg = f"{module_name!r} has no attribute {attr_path!r}"
            raise click.BadParameter(msg) from exc
    return obj


def parse_pairs(pairs: tuple[str, ...]) -> dict[str, str]:
    """Turn ``KEY=VALUE`` arguments into a dict."""
    out: dict[str, str] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            msg = f"expected KEY=VALUE, got {pair!r}"
            raise click.BadParameter(msg, param_hint="PAIRS")
        out[key] = raw
    return out


def snapshot_to_jsonable(snapshot: Any) -> Any:
    if isinstance(snapshot, BaseModel):
        return snapshot.model_dump(mode="json")
    if dataclasses.is_dataclass(snapshot) and not isinstance(snapshot, type):
        return dataclasses.asdict(snapshot)
    return snapshot


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="konfbind")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging (not-found keys).")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option(
    "--debug-store",
    "debug_stores",
    multiple=True,
    metavar="NAME",
    help="Log not-found keys of store NAME without full debug output.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    debug_stores: tuple[str, ...],
) -> None:
    """konfbind — bind configuration keys onto typed records."""
    settings = KonfbindSettings.from_env(
        json_output=json_output or None,
        verbose=verbose or None,
        log_json=log_json or None,
        debug_stores=debug_stores or None,
    )
    configure_logging(
        verbose=settings.verbose,
        log_json=settings.log_json,
        debug_stores=settings.debug_stores,
    )
    ctx.obj = settings
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument("target")
@click.pass_obj
def keys(settings: KonfbindSettings, target: str) -> None:
    """List every key path of the record type TARGET (MODULE:ATTR)."""
    record_type = load_target(target)
    if not is_record_type(record_type):
        raise click.ClickException(f"{target} is not a dataclass or pydantic model")
    store = Store(settings.store)
    key_paths = store.bind_strict(record_type)
    if settings.json_output:
        click.echo(json.dumps(key_paths))
        return
    for key in key_paths:
        click.echo(key)


@cli.command()
@click.argument("target")
@click.argument("pairs", nargs=-1)
@click.pass_obj
def apply(settings: KonfbindSettings, target: str, pairs: tuple[str, ...]) -> None:
    """Bind TARGET (MODULE:ATTR), apply KEY=VALUE PAIRS, print the result as JSON."""
    values = parse_pairs(pairs)
    store = Store(settings.store)
    try:
        store.bind(load_target(target))
        missing = store.set_values(values)
    except KonfbindError as exc:
        raise click.ClickException(str(exc)) from exc

    payload = snapshot_to_jsonable(store.value())
    if settings.json_output:
        payload = {"value": payload, "not_found": missing}
    else:
        for key in missing:
            click.echo(f"not found: {key}", err=True)
    click.echo(json.dumps(payload, indent=2, sort_keys=True, default=str))
