import yaml
from pathlib import Path
import os
from typing import Any, Dict, Optional, List, Callable, Tuple
import logging
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler, FileModifiedEvent
import time
import re

ENV_LINE = re.compile(r'^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$')
ENV_REF = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}|\$([A-Za-z_][A-Za-z0-9_]*)')


def default_config(config_dir: Path) -> Dict[str, Any]:
    """Default configuration written on first start."""
    return {
        "api": {
            "host": "127.0.0.1",
            "port": 8765,
        },
        "database": {
            "path": str(config_dir / "tracker.db"),
        },
        "logging": {
            "level": "INFO",
            "file": str(config_dir / "tracker.log"),
        },
        "users": {
            "default": "Student",
        },
        "import": {
            "max_upload_mb": 10,
            "slash_date_order": "MDY",  # MM/DD/YYYY; use DMY for DD/MM/YYYY sheets
            "error_display_limit": 20,
        },
        "google_calendar": {
            "enabled": False,
            "client_secret_path": "${GOOGLE_CLIENT_SECRET_PATH}",
            "redirect_uri": "http://127.0.0.1:8765/api/components/calendar/google/callback",
            "time_zone": "America/New_York",
            "event_duration_minutes": 60,
        },
    }


def expand_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR references anywhere in strings, recursing into dicts and lists.

    Unset variables are left as written.
    """
    if isinstance(value, dict):
        return {key: expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env(item) for item in value]
    if isinstance(value, str):
        return ENV_REF.sub(lambda m: os.environ.get(m.group(1) or m.group(2), m.group(0)), value)
    return value


def parse_env_line(line: str) -> Optional[Tuple[str, str]]:
    """Parse one KEY=VALUE line of a .env file; comments and junk give None."""
    line = line.strip()
    if not line or line.startswith('#'):
        return None
    match = ENV_LINE.match(line)
    if not match:
        return None
    key, value = match.groups()
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return key, value


def diff_config(old: Dict, new: Dict, prefix: str = "") -> List[Tuple[str, str, Any, Any]]:
    """List (kind, dotted.path, old, new) for every leaf that was added, removed or changed."""
    changes = []
    for key in sorted(set(old) | set(new), key=str):
        path = f"{prefix}.{key}" if prefix else str(key)
        if key not in new:
            changes.append(("removed", path, old[key], None))
        elif key not in old:
            changes.append(("added", path, None, new[key]))
        elif isinstance(old[key], dict) and isinstance(new[key], dict):
            changes.extend(diff_config(old[key], new[key], path))
        elif old[key] != new[key]:
            changes.append(("changed", path, old[key], new[key]))
    return changes


class ConfigChangeHandler(FileSystemEventHandler):
    """Reloads the config when its file is written, at most once per cooldown."""

    def __init__(self, config, cooldown: float = 1.0):
        self.config = config
        self.cooldown = cooldown
        self.last_reload = float("-inf")

    def on_modified(self, event):
        if not isinstance(event, FileModifiedEvent):
            return
        if Path(event.src_path) != self.config.config_file:
            return

        now = time.monotonic()
        if now - self.last_reload < self.cooldown:
            return
        self.last_reload = now
        self.config.reload()


class Config:
    def __init__(self, config_path: Optional[str] = None, watch: bool = False):
        self.change_callbacks: List[Callable] = []
        self._loading = False
        self.observer = None
        self.data: Dict[str, Any] = {}

        if config_path:
            self.config_file = Path(config_path).expanduser().resolve()
        else:
            self.config_file = Path.home() / ".assignment_tracker" / "config.yaml"
        self.config_dir = self.config_file.parent
        logging.debug(f"Using config file: {self.config_file}")

        self._load_env_file()
        self._ensure_config_exists()
        self.data = self._read_config() or default_config(self.config_dir)

        if watch:
            self.observer = Observer()
            self.observer.schedule(ConfigChangeHandler(self), str(self.config_dir), recursive=False)
            self.observer.start()
            logging.info(f"Watching {self.config_file} for changes")

    def register_change_callback(self, callback: Callable) -> None:
        """Register a callback to be called with the new data after each reload"""
        self.change_callbacks.append(callback)

    def reload(self) -> None:
        """Re-read the config file, log what changed and notify listeners.

        A file that fails to load leaves the current data in place.
        """
        if self._loading:
            return

        self._loading = True
        try:
            logging.info("Config file change detected - reloading configuration")
            # editors write in several steps
            time.sleep(0.1)

            new_data = self._read_config()
            if new_data is None:
                logging.info("Keeping previous configuration")
                return

            old_data, self.data = self.data, new_data
            self._log_config_changes(old_data, new_data)

            for callback in self.change_callbacks:
                try:
                    callback(self.data)
                except Exception as e:
                    logging.exception(f"Error in config change callback: {e}")
        finally:
            self._loading = False

    def _log_config_changes(self, old_config: Dict, new_config: Dict) -> None:
        changes = diff_config(old_config, new_config)
        if not changes:
            logging.info("Config reloaded with no changes")
            return
        for kind, path, old, new in changes:
            if kind == "changed":
                logging.info(f"Config changed: {path}: {old} -> {new}")
            elif kind == "added":
                logging.info(f"Config added: {path}: {new}")
            else:
                logging.info(f"Config removed: {path}: {old}")

    def cleanup(self) -> None:
        """Stop the file observer"""
        if self.observer is not None:
            self.observer.stop()
            self.observer.join()
            self.observer = None

    def _ensure_config_exists(self) -> None:
        if self.config_file.exists():
            return
        logging.info(f"Creating default config file: {self.config_file}")
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(yaml.safe_dump(default_config(self.config_dir), sort_keys=False))

    def _load_env_file(self) -> None:
        """Export KEY=VALUE pairs from the nearest .env; variables already set win."""
        candidates = [self.config_dir / ".env", self.config_dir.parent / ".env", Path.cwd() / ".env"]
        env_file = next((path for path in candidates if path.is_file()), None)
        if env_file is None:
            return

        logging.info(f"Loading environment variables from: {env_file}")
        try:
            lines = env_file.read_text().splitlines()
        except OSError as e:
            logging.warning(f"Error loading .env file: {e}")
            return

        for line in lines:
            pair = parse_env_line(line)
            if pair and pair[0] not in os.environ:
                os.environ[pair[0]] = pair[1]

    def _read_config(self) -> Optional[Dict[str, Any]]:
        """Parse the config file into a complete config dict, or None if it can't be used."""
        try:
            raw = yaml.safe_load(self.config_file.read_text())
        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Error loading config: {e}")
            return None
        if not isinstance(raw, dict):
            logging.error("Invalid config format: root must be a dictionary")
            return None

        data = default_config(self.config_dir)
        for section, values in expand_env(raw).items():
            if isinstance(values, dict) and isinstance(data.get(section), dict):
                data[section].update(values)
            else:
                data[section] = values

        for section, key in (("logging", "file"), ("database", "path")):
            if isinstance(data.get(section), dict) and data[section].get(key):
                data[section][key] = os.path.expanduser(data[section][key])
        return data

    def get_section(self, name: str) -> Dict[str, Any]:
        """Return one top-level config section (empty dict if missing)"""
        section = self.data.get(name)
        return section if isinstance(section, dict) else {}

    def save(self) -> None:
        """Write current config back to the config file"""
        with open(self.config_file, "w") as f:
            yaml.safe_dump(self.data, f, sort_keys=False)
