"""Command line interface entry point."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import click

from tracking_pipeline.configuration import (
    DEFAULT_CONFIG_FILENAME,
    Configuration,
    ConfigurationError,
    load_configuration,
    write_placeholder_configuration,
)
from tracking_pipeline.destination_resolution import DestinationEntryError, resolve_enabled
from tracking_pipeline.event_routing import (
    TrackingCall,
    build_transform_dispatcher,
    normalize_tracking_call,
)
from tracking_pipeline.name_translation import to_sdk_names
from tracking_pipeline.property_extraction import flatten
from tracking_pipeline.transform_dispatch import RETRY_FAILED_MESSAGE


class CliError(Exception):
    """Custom CLI error."""


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="tracking-pipeline")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging on stderr")
def cli(verbose: bool) -> None:
    """Tracking event normalization and transformation utility."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML pipeline configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder YAML pipeline configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


_CONFIG_OPTION = click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to YAML/JSON pipeline configuration file",
)
_EVENT_OPTION = click.option(
    "--event",
    "event_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to a JSON tracking message",
)


@cli.command(name="normalize")
@_CONFIG_OPTION
@_EVENT_OPTION
def normalize(config_path: str, event_path: str) -> None:
    """Print the normalized, destination-mapped form of a tracking message."""
    configuration = _load_configuration(config_path)
    call = TrackingCall.from_message(_read_json_object(event_path))
    normalized = normalize_tracking_call(call, configuration)
    click.echo(_dump(normalized.to_dict()))


@cli.command(name="resolve-destinations")
@_CONFIG_OPTION
@_EVENT_OPTION
def resolve_destinations(config_path: str, event_path: str) -> None:
    """Print the configured destinations a tracking message is delivered to."""
    configuration = _load_configuration(config_path)
    message = _read_json_object(event_path)
    intent = message.get("integrations")
    intent = to_sdk_names(intent if isinstance(intent, Mapping) else {}, configuration.names)
    try:
        enabled = resolve_enabled(intent, configuration.destinations.enabled)
    except DestinationEntryError as exc:
        raise CliError(str(exc)) from exc
    click.echo(_dump(enabled))


@cli.command(name="flatten")
@click.option(
    "--input",
    "input_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to a JSON document",
)
def flatten_document(input_path: str) -> None:
    """Print a JSON document flattened to dot/index-joined keys."""
    click.echo(_dump(flatten(_read_json(input_path))))


@cli.command(name="transform")
@_CONFIG_OPTION
@_EVENT_OPTION
@click.option(
    "--write-key",
    "write_key",
    required=False,
    type=str,
    help="Write key used for basic auth; defaults to transformation.write_key",
)
def transform(config_path: str, event_path: str, write_key: str | None) -> None:
    """Send a tracking message to the transformation endpoint and print the result."""
    configuration = _load_configuration(config_path)
    event = _read_json_object(event_path)
    resolved_write_key = write_key or configuration.transformation.write_key
    if not resolved_write_key:
        raise CliError("A write key is required (--write-key or transformation.write_key).")

    results: list[Any] = []
    dispatcher = build_transform_dispatcher(configuration.transformation)
    asyncio.run(
        dispatcher.process_transformation(
            event,
            resolved_write_key,
            configuration.transformation.endpoint,
            results.append,
        )
    )
    transformed_batch = results[0] if results else None
    if transformed_batch is None:
        raise CliError(RETRY_FAILED_MESSAGE)
    click.echo(_dump(transformed_batch))


def _load_configuration(config_path: str) -> Configuration:
    try:
        return load_configuration(config_path)
    except (ConfigurationError, OSError) as exc:
        raise CliError(str(exc)) from exc
    except UnicodeDecodeError as exc:
        raise CliError(f"Failed to read {config_path}: {exc}") from exc


def _read_json(path: str) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise CliError(f"Failed to read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise CliError(f"Invalid JSON in {path}: {exc}") from exc


def _read_json_object(path: str) -> Mapping[str, Any]:
    document = _read_json(path)
    if not isinstance(document, Mapping):
        raise CliError(f"Expected a JSON object in {path}.")
    return document


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, sort_keys=True)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
