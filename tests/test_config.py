from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest
import yaml
from fastapi import HTTPException

from assignment_tracker.core.config import Config, ConfigChangeHandler, diff_config, expand_env, parse_env_line
from tests.utils import write_config


@pytest.fixture(autouse=True)
def isolated_environ(monkeypatch):
    monkeypatch.setattr(os, "environ", dict(os.environ))


def test_default_config_is_written(tmp_path) -> None:
    config_file = tmp_path / "fresh" / "config.yaml"
    config = Config(config_path=str(config_file))
    assert config_file.exists()
    assert config.get_section("import") == {
        "max_upload_mb": 10,
        "slash_date_order": "MDY",
        "error_display_limit": 20,
    }
    assert config.get_section("users")["default"] == "Student"
    assert config.get_section("google_calendar")["enabled"] is False
    assert config.get_section("nope") == {}


def test_partial_sections_are_filled_from_defaults(tmp_path) -> None:
    config_file = write_config(tmp_path, **{"import": {"slash_date_order": "DMY"}})
    config = Config(config_path=str(config_file))
    assert config.get_section("import")["slash_date_order"] == "DMY"
    assert config.get_section("import")["max_upload_mb"] == 10
    assert config.get_section("api")["port"] == 8765


def test_env_vars_are_substituted(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("GOOGLE_CLIENT_SECRET_PATH", "/secrets/client.json")
    config = Config(config_path=str(tmp_path / "config.yaml"))
    assert config.get_section("google_calendar")["client_secret_path"] == "/secrets/client.json"


def test_dotenv_does_not_override_existing_vars(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("TRACKER_ALREADY_SET", "from-shell")
    (tmp_path / ".env").write_text(
        "# local settings\nTRACKER_FROM_DOTENV='Alex'\nTRACKER_ALREADY_SET=from-dotenv\n"
    )
    config_file = write_config(tmp_path, users={"default": "${TRACKER_FROM_DOTENV}"})
    config = Config(config_path=str(config_file))
    assert config.get_section("users")["default"] == "Alex"
    assert os.environ["TRACKER_ALREADY_SET"] == "from-shell"


def test_home_is_expanded_in_paths(tmp_path) -> None:
    config_file = write_config(tmp_path, database={"path": "~/tracker-test.db"})
    config = Config(config_path=str(config_file))
    assert config.get_section("database")["path"] == str(Path("~/tracker-test.db").expanduser())


def test_malformed_config_falls_back_to_defaults(tmp_path) -> None:
    config_file = tmp_path / "config.yaml"
    config_file.write_text("- just\n- a list\n")
    config = Config(config_path=str(config_file))
    assert config.get_section("import")["slash_date_order"] == "MDY"


def test_reload_notifies_callbacks(tmp_path) -> None:
    config_file = write_config(tmp_path)
    config = Config(config_path=str(config_file))
    seen = []
    config.register_change_callback(seen.append)

    data = yaml.safe_load(config_file.read_text())
    data["import"] = {"error_display_limit": 5}
    config_file.write_text(yaml.dump(data))
    config.reload()

    assert len(seen) == 1
    assert seen[0]["import"]["error_display_limit"] == 5
    assert config.get_section("import")["error_display_limit"] == 5


def test_reload_keeps_previous_config_on_error(tmp_path) -> None:
    config_file = write_config(tmp_path, users={"default": "Alex"})
    config = Config(config_path=str(config_file))
    config_file.write_text("users: [unclosed\n")
    config.reload()
    assert config.get_section("users")["default"] == "Alex"


def test_save_round_trips(tmp_path) -> None:
    config = Config(config_path=str(tmp_path / "config.yaml"))
    config.data["users"]["default"] = "Jordan"
    config.save()
    assert Config(config_path=str(tmp_path / "config.yaml")).get_section("users")["default"] == "Jordan"


def test_app_resolves_users(tracker_app) -> None:
    default_id = tracker_app.resolve_user_id()
    assert tracker_app.resolve_user_id(None) == default_id
    assert tracker_app.resolve_user_id(default_id) == default_id
    with pytest.raises(HTTPException) as excinfo:
        tracker_app.resolve_user_id(default_id + 100)
    assert excinfo.value.status_code == 404


def test_app_builds_importer_from_config(tracker_app) -> None:
    tracker_app.config.data["import"]["slash_date_order"] = "dmy"
    assert tracker_app.make_importer().slash_order == "DMY"


def test_config_change_updates_log_level(tracker_app) -> None:
    root = logging.getLogger()
    previous = root.level
    try:
        tracker_app.handle_config_change({"logging": {"level": "warning"}})
        assert root.level == logging.WARNING
    finally:
        root.setLevel(previous)


def test_env_references_inside_strings(monkeypatch) -> None:
    monkeypatch.setenv("TRACKER_HOST", "example.org")
    monkeypatch.delenv("TRACKER_MISSING", raising=False)
    assert expand_env("https://${TRACKER_HOST}:8765/cb") == "https://example.org:8765/cb"
    assert expand_env("$TRACKER_HOST/x") == "example.org/x"
    assert expand_env({"a": ["${TRACKER_MISSING}", 3]}) == {"a": ["${TRACKER_MISSING}", 3]}


@pytest.mark.parametrize(
    "line, expected",
    [
        ("KEY=value", ("KEY", "value")),
        ("export KEY = 'quoted value'", ("KEY", "quoted value")),
        ('KEY="a=b"', ("KEY", "a=b")),
        ("# comment", None),
        ("", None),
        ("not a pair", None),
    ],
)
def test_parse_env_line(line, expected) -> None:
    assert parse_env_line(line) == expected


def test_diff_config_reports_leaf_changes() -> None:
    old = {"api": {"port": 8765, "host": "127.0.0.1"}, "users": {"default": "Student"}}
    new = {"api": {"port": 9000, "host": "127.0.0.1"}, "extra": 1}
    assert diff_config(old, new) == [
        ("changed", "api.port", 8765, 9000),
        ("added", "extra", None, 1),
        ("removed", "users", {"default": "Student"}, None),
    ]
    assert diff_config(old, old) == []


def test_reload_logs_changes(tmp_path, caplog) -> None:
    config_file = write_config(tmp_path, api={"port": 8765})
    config = Config(config_path=str(config_file))
    config_file.write_text(yaml.safe_dump({"api": {"port": 9001}}))
    with caplog.at_level(logging.INFO):
        config.reload()
    assert "Config changed: api.port: 8765 -> 9001" in caplog.text


def test_change_handler_reloads_only_its_file(tmp_path) -> None:
    from watchdog.events import FileModifiedEvent

    class Recorder:
        config_file = tmp_path / "config.yaml"
        reloads = 0

        def reload(self):
            self.reloads += 1

    recorder = Recorder()
    handler = ConfigChangeHandler(recorder, cooldown=60)
    handler.on_modified(FileModifiedEvent(str(tmp_path / "other.yaml")))
    handler.on_modified(FileModifiedEvent(str(tmp_path / "config.yaml")))
    handler.on_modified(FileModifiedEvent(str(tmp_path / "config.yaml")))
    assert recorder.reloads == 1
