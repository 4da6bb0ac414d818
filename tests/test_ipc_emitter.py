"""Tests for clawbox.ipc.emitter: payload shapes and privilege rules."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from clawbox.ipc.emitter import IpcContext, IpcEmitter, PermissionDeniedError
from clawbox.ipc.schedule import ScheduleValidationError

from conftest import make_context


def _read_single(directory: Path) -> dict:
    files = list(directory.glob("*.json"))
    assert len(files) == 1
    return json.loads(files[0].read_text())


class TestSendMessage:
    def test_writes_message_payload(self, group_emitter, ipc_dir):
        group_emitter.send_message("hello")
        payload = _read_single(ipc_dir / "messages")
        assert payload["type"] == "message"
        assert payload["chatJid"] == "team@g.us"
        assert payload["groupFolder"] == "team"
        assert payload["text"] == "hello"
        assert "timestamp" in payload
        assert "sender" not in payload

    def test_includes_sender_when_given(self, group_emitter, ipc_dir):
        group_emitter.send_message("hi", sender="Researcher")
        assert _read_single(ipc_dir / "messages")["sender"] == "Researcher"

    def test_returns_receipt(self, group_emitter, ipc_dir):
        filename = group_emitter.send_message("hello")
        assert (ipc_dir / "messages" / filename).is_file()


class TestScheduleTask:
    def test_non_main_target_override_ignored(self, group_emitter, ipc_dir):
        group_emitter.schedule_task("x", "interval", "300000", target_jid="other@g.us")
        payload = _read_single(ipc_dir / "tasks")
        assert payload["targetJid"] == "team@g.us"
        assert payload["createdBy"] == "team"

    def test_main_target_override_honored(self, main_emitter, ipc_dir):
        main_emitter.schedule_task("x", "cron", "0 9 * * *", target_jid="other@g.us")
        assert _read_single(ipc_dir / "tasks")["targetJid"] == "other@g.us"

    def test_main_without_override_targets_own_chat(self, main_emitter, ipc_dir):
        main_emitter.schedule_task("x", "once", "2026-02-01T15:30:00")
        assert _read_single(ipc_dir / "tasks")["targetJid"] == "main@g.us"

    def test_payload_shape(self, group_emitter, ipc_dir):
        group_emitter.schedule_task("check mail", "interval", "300000", context_mode="isolated")
        payload = _read_single(ipc_dir / "tasks")
        assert payload["type"] == "schedule_task"
        assert payload["prompt"] == "check mail"
        assert payload["schedule_type"] == "interval"
        assert payload["schedule_value"] == "300000"
        assert payload["context_mode"] == "isolated"

    def test_invalid_schedule_writes_nothing(self, group_emitter, ipc_dir):
        with pytest.raises(ScheduleValidationError):
            group_emitter.schedule_task("x", "cron", "not-a-cron")
        assert not (ipc_dir / "tasks").exists()

    def test_interval_written_stripped(self, group_emitter, ipc_dir):
        group_emitter.schedule_task("x", "interval", " 300000 ")
        assert _read_single(ipc_dir / "tasks")["schedule_value"] == "300000"

    def test_underscored_interval_writes_nothing(self, group_emitter, ipc_dir):
        with pytest.raises(ScheduleValidationError, match="Invalid interval"):
            group_emitter.schedule_task("x", "interval", "1_000")
        assert not (ipc_dir / "tasks").exists()

    def test_invalid_context_mode_writes_nothing(self, group_emitter, ipc_dir):
        with pytest.raises(ScheduleValidationError):
            group_emitter.schedule_task("x", "interval", "1000", context_mode="shared")
        assert not (ipc_dir / "tasks").exists()


class TestTaskActions:
    @pytest.mark.parametrize("action", ["pause_task", "resume_task", "cancel_task"])
    def test_action_payload(self, group_emitter, ipc_dir, action):
        getattr(group_emitter, action)("task-42")
        payload = _read_single(ipc_dir / "tasks")
        assert payload["type"] == action
        assert payload["taskId"] == "task-42"
        assert payload["groupFolder"] == "team"
        assert payload["isMain"] is False

    def test_main_flag_carried(self, main_emitter, ipc_dir):
        main_emitter.cancel_task("t1")
        assert _read_single(ipc_dir / "tasks")["isMain"] is True


class TestRegisterGroup:
    def test_refused_for_non_main(self, group_emitter, ipc_dir):
        with pytest.raises(PermissionDeniedError, match="Only the main group"):
            group_emitter.register_group("new@g.us", "New", "new", "@Andy")
        assert not (ipc_dir / "tasks").exists()

    def test_main_can_register(self, main_emitter, ipc_dir):
        main_emitter.register_group("new@g.us", "New", "new", "@Andy")
        payload = _read_single(ipc_dir / "tasks")
        assert payload == {
            "type": "register_group",
            "jid": "new@g.us",
            "name": "New",
            "folder": "new",
            "trigger": "@Andy",
            "timestamp": payload["timestamp"],
        }


class TestIpcContext:
    def test_env_roundtrip(self, monkeypatch, tmp_path):
        ctx = make_context(tmp_path, is_main=True)
        for key, value in ctx.to_env().items():
            monkeypatch.setenv(key, value)
        assert IpcContext.from_env() == ctx

    def test_from_env_defaults_to_non_main(self, monkeypatch):
        monkeypatch.delenv("CLAWBOX_IS_MAIN", raising=False)
        monkeypatch.delenv("CLAWBOX_IPC_DIR", raising=False)
        ctx = IpcContext.from_env()
        assert ctx.is_main is False
        assert ctx.ipc_dir == Path("/workspace/ipc")

    def test_directory_layout(self, tmp_path):
        ctx = make_context(tmp_path)
        assert ctx.messages_dir == tmp_path / "messages"
        assert ctx.tasks_dir == tmp_path / "tasks"
        assert ctx.tasks_snapshot == tmp_path / "current_tasks.json"

    def test_emitter_uses_context(self, tmp_path):
        emitter = IpcEmitter(make_context(tmp_path, chat_jid="x@g.us"))
        emitter.send_message("hi")
        assert _read_single(tmp_path / "messages")["chatJid"] == "x@g.us"
