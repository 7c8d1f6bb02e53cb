from __future__ import annotations

import io
import json
import logging
from pathlib import Path

from testament import logging as tlog


def _json_lines(stream: io.StringIO):
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


def test_bind_and_clear() -> None:
    tlog.bind(stage="sign", digest=b"\x01")
    assert tlog.context() == {"stage": "sign", "digest": "01"}
    tlog.bind(stage="signed")
    assert tlog.context() == {"stage": "signed", "digest": "01"}
    tlog.clear_context()
    assert tlog.context() == {}


def test_trace_scope_restores_context() -> None:
    tlog.bind(chain_id=1)
    with tlog.trace_scope("abc") as tid:
        assert tid == "abc"
        assert tlog.context() == {"chain_id": 1, "trace_id": "abc"}
    assert tlog.context() == {"chain_id": 1}
    with tlog.trace_scope() as generated:
        assert len(generated) == 12


def test_json_output_carries_context_and_extras() -> None:
    stream = io.StringIO()
    tlog.configure(json=True, level="DEBUG", stream=stream)
    log = tlog.get_logger("testament.test")
    with tlog.trace_scope("t1"):
        tlog.with_fields(log, stage="encrypted").info("will encrypted", extra={"bytes": 269})
    (line,) = _json_lines(stream)
    assert line["msg"] == "will encrypted"
    assert line["level"] == "INFO"
    assert line["logger"] == "testament.test"
    assert line["trace_id"] == "t1"
    assert line["stage"] == "encrypted"
    assert line["bytes"] == 269


def test_level_filters() -> None:
    stream = io.StringIO()
    tlog.configure(json=True, level="WARNING", stream=stream)
    log = tlog.get_logger("testament.test")
    log.info("hidden")
    log.warning("shown")
    assert [line["msg"] for line in _json_lines(stream)] == ["shown"]


def test_reconfigure_replaces_handlers() -> None:
    first, second = io.StringIO(), io.StringIO()
    tlog.configure(json=True, stream=first)
    tlog.configure(json=True, stream=second)
    tlog.get_logger("testament.test").info("once")
    assert first.getvalue() == ""
    assert len(_json_lines(second)) == 1
    assert len(logging.getLogger("testament").handlers) == 1


def test_text_format_without_tty() -> None:
    stream = io.StringIO()
    tlog.configure(json=False, level="INFO", stream=stream)
    tlog.bind(stage="signed")
    tlog.get_logger("testament.test").info("will signed", extra={"deadline": 5})
    out = stream.getvalue()
    assert "\x1b[" not in out
    assert "| INFO  | testament.test | stage=signed deadline=5 | will signed" in out


def test_adapter_merges_call_site_extra() -> None:
    stream = io.StringIO()
    tlog.configure(json=True, stream=stream)
    adapter = tlog.with_fields(tlog.get_logger("testament.test"), stage="a", will="0x1")
    adapter.info("m", extra={"stage": "b"})
    (line,) = _json_lines(stream)
    assert line["stage"] == "b"
    assert line["will"] == "0x1"


def test_exception_is_rendered() -> None:
    stream = io.StringIO()
    tlog.configure(json=True, stream=stream)
    try:
        raise ValueError("boom")
    except ValueError:
        tlog.get_logger("testament.test").exception("failed")
    (line,) = _json_lines(stream)
    assert "ValueError: boom" in line["err"]


def test_file_sink(tmp_path: Path) -> None:
    path = tmp_path / "logs" / "engine.jsonl"
    tlog.configure(json=False, stream=io.StringIO(), file_path=path)
    tlog.get_logger("testament.test").info("to file")
    for handler in logging.getLogger("testament").handlers:
        handler.flush()
    (line,) = [json.loads(x) for x in path.read_text().splitlines()]
    assert line["msg"] == "to file"


def test_format_from_env(monkeypatch) -> None:
    monkeypatch.setenv("TESTAMENT_LOG_FORMAT", "json")
    stream = io.StringIO()
    tlog.configure(stream=stream)
    tlog.get_logger("testament.test").info("env")
    assert _json_lines(stream)[0]["msg"] == "env"
