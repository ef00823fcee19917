"""CLI orchestration integration tests."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path

import pytest
from click.testing import CliRunner
from tracking_pipeline import cli as cli_module
from tracking_pipeline.cli import cli
from tracking_pipeline.transform_dispatch import (
    RETRY_FAILED_MESSAGE,
    RetryPolicy,
    TransformDispatcher,
    TransportResponse,
)


def _write_config(tmp_path: Path, write_key: str | None = "wk") -> Path:
    transformation: dict[str, object] = {"data_plane_url": "https://dataplane.example.com"}
    if write_key:
        transformation["write_key"] = write_key
    config = {
        "transformation": transformation,
        "destinations": {
            "enabled": [{"name": "GA4", "config": {"measurementId": "G-1"}}, {"name": "AM"}],
            "transform": ["GA4"],
        },
        "mappings": {
            "event_names": [{"src": ["order completed"], "dest": "purchase"}],
            "event_parameters": [{"src": "total", "dest": "value"}],
        },
        "names": {"common": {"Google Analytics 4": "GA4"}},
    }
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config), encoding="utf-8")
    return path


def _write_event(tmp_path: Path) -> Path:
    event = {
        "type": "track",
        "event": "Order Completed",
        "userId": "u-1",
        "properties": {"total": 42, "coupon": "X"},
        "integrations": {"All": False, "Google Analytics 4": True},
    }
    path = tmp_path / "event.json"
    path.write_text(json.dumps(event), encoding="utf-8")
    return path


def _config_and_event_args(tmp_path: Path) -> list[str]:
    return ["--config", str(_write_config(tmp_path)), "--event", str(_write_event(tmp_path))]


class StaticTransport:
    def __init__(self, response: TransportResponse) -> None:
        self.response = response
        self.calls = 0

    async def post(
        self, url: str, content: bytes, headers: Mapping[str, str]
    ) -> TransportResponse:
        self.calls += 1
        return self.response


async def _no_sleep(_: float) -> None:
    return None


def _patch_dispatcher(monkeypatch: pytest.MonkeyPatch, transport: StaticTransport) -> None:
    def build(settings, **_kwargs) -> TransformDispatcher:
        return TransformDispatcher(
            transport,
            RetryPolicy(max_retries=settings.retry_count, backoff_seconds=settings.backoff_seconds),
            sleep=_no_sleep,
        )

    monkeypatch.setattr(cli_module, "build_transform_dispatcher", build)


def test_generate_config_command_writes_placeholder_file_with_default_name(tmp_path: Path) -> None:
    runner = CliRunner()
    with runner.isolated_filesystem(temp_dir=str(tmp_path)):
        result = runner.invoke(cli, ["generate-config"])
        output_path = Path("config.yaml").resolve()

        assert result.exit_code == 0
        assert output_path.exists()
        content = output_path.read_text(encoding="utf-8")
        assert "transformation:" in content
        assert "<REQUIRED>" in content
        assert str(output_path) in result.output


def test_generate_config_command_fails_when_output_file_already_exists(tmp_path: Path) -> None:
    runner = CliRunner()
    output_path = tmp_path / "config.yaml"
    output_path.write_text("already-there", encoding="utf-8")

    result = runner.invoke(cli, ["generate-config", "--output", str(output_path)])

    assert result.exit_code != 0
    assert "already exists" in str(result.exception).lower()
    assert output_path.read_text(encoding="utf-8") == "already-there"


def test_normalize_command_prints_mapped_event(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["normalize", *_config_and_event_args(tmp_path)],
    )

    assert result.exit_code == 0
    normalized = json.loads(result.output)
    assert normalized["destination_event_name"] == "purchase"
    assert normalized["properties"] == {"value": 42}
    assert normalized["integrations"] == {"All": False, "GA4": True}
    assert normalized["traits"] == {"userId": "u-1"}


def test_resolve_destinations_command_prints_enabled_entries(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        cli,
        [
            "resolve-destinations",
            "--config",
            str(_write_config(tmp_path)),
            "--event",
            str(_write_event(tmp_path)),
        ],
    )

    assert result.exit_code == 0
    assert json.loads(result.output) == [{"name": "GA4", "config": {"measurementId": "G-1"}}]


def test_flatten_command_prints_flat_document(tmp_path: Path) -> None:
    runner = CliRunner()
    input_path = tmp_path / "doc.json"
    input_path.write_text(json.dumps({"a": {"b": [1, {"c": 2}]}}), encoding="utf-8")

    result = runner.invoke(cli, ["flatten", "--input", str(input_path)])

    assert result.exit_code == 0
    assert json.loads(result.output) == {"a.b.0": 1, "a.b.1.c": 2}


def test_transform_command_prints_transformed_batch(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    body = {"transformedBatch": [{"id": "GA4", "status": "200", "payload": [{"orderNo": 1}]}]}
    transport = StaticTransport(TransportResponse(200, json.dumps(body)))
    _patch_dispatcher(monkeypatch, transport)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["transform", *_config_and_event_args(tmp_path)],
    )

    assert result.exit_code == 0
    assert json.loads(result.output) == body["transformedBatch"]
    assert transport.calls == 1


def test_transform_command_fails_after_retries_are_exhausted(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    transport = StaticTransport(TransportResponse(500, ""))
    _patch_dispatcher(monkeypatch, transport)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["transform", *_config_and_event_args(tmp_path)],
    )

    assert result.exit_code != 0
    assert RETRY_FAILED_MESSAGE in str(result.exception)
    assert transport.calls == 4


def test_transform_command_requires_write_key(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        cli,
        [
            "transform",
            "--config",
            str(_write_config(tmp_path, write_key=None)),
            "--event",
            str(_write_event(tmp_path)),
        ],
    )

    assert result.exit_code != 0
    assert "write key is required" in str(result.exception)
