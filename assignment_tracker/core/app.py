from typing import Any, Dict, Optional
import logging
import sys
from pathlib import Path

from fastapi import HTTPException

from .config import Config
from .db import init_db
from .models import seed_defaults


class TrackerApp:
    """Wires config, logging, database and feature services; owns the API app."""

    def __init__(
        self,
        config_path: Optional[str] = None,
        db_url: Optional[str] = None,
        watch_config: bool = False,
        setup_logging: bool = True,
    ):
        self.logger = logging.getLogger(self.__class__.__name__)

        self.config = Config(config_path=config_path, watch=watch_config)
        self.config.register_change_callback(self.handle_config_change)

        if setup_logging:
            self._setup_logging()

        # Initialize database and default rows before serving requests
        init_db(self.config.data, db_url=db_url)
        seed_defaults(self.config.data)

        self.api = None

    def _setup_logging(self):
        """Configure logging to write to both file and stdout"""
        root_logger = logging.getLogger()
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
        level = str(self.config.data["logging"].get("level", "INFO")).upper()
        root_logger.setLevel(getattr(logging, level, logging.INFO))

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
        )

        log_file = self.config.data["logging"].get("file")
        if log_file:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        logging.info("Assignment tracker starting...")

    @property
    def import_config(self) -> Dict[str, Any]:
        return self.config.get_section("import")

    @property
    def calendar_config(self) -> Dict[str, Any]:
        return self.config.get_section("google_calendar")

    def resolve_user_id(self, requested_user_id: Optional[int] = None) -> int:
        """User for one request: the requested id if it exists, else the configured default user."""
        from assignment_tracker.features.users.service import get_or_create_user, get_user

        if requested_user_id is not None:
            if get_user(requested_user_id) is None:
                raise HTTPException(status_code=404, detail=f"User {requested_user_id} not found")
            return requested_user_id
        default_name = self.config.get_section("users").get("default") or "Student"
        return get_or_create_user(default_name).id

    def make_importer(self):
        from assignment_tracker.features.spreadsheet_import.importer import SpreadsheetImporter
        from assignment_tracker.features.spreadsheet_import.storage import SqlImportStorage

        slash_order = str(self.import_config.get("slash_date_order", "MDY")).upper()
        return SpreadsheetImporter(SqlImportStorage(), slash_order=slash_order)

    def make_calendar_client(self, token_info: Optional[Dict[str, Any]] = None):
        """GoogleCalendarClient from the google_calendar config section."""
        from assignment_tracker.features.calendar.google_calendar import GoogleCalendarClient

        cfg = self.calendar_config
        return GoogleCalendarClient(
            client_secret_path=cfg.get("client_secret_path") or "",
            redirect_uri=cfg.get("redirect_uri") or "",
            token_info=token_info,
            time_zone=cfg.get("time_zone", "America/New_York"),
            event_duration_minutes=int(cfg.get("event_duration_minutes", 60)),
        )

    def create_api(self):
        from assignment_tracker.api.server import create_app

        if self.api is None:
            self.api = create_app(self)
        return self.api

    def handle_config_change(self, new_config: Dict[str, Any]) -> None:
        """Apply a reloaded config (log level takes effect immediately)."""
        self.logger.info("Handling config change")
        try:
            level = str(new_config.get("logging", {}).get("level", "INFO")).upper()
            logging.getLogger().setLevel(getattr(logging, level, logging.INFO))
        except AttributeError as e:
            self.logger.error(f"Error handling config change: {e}", exc_info=True)

    def run(self):
        from assignment_tracker.api.server import run_api_server

        try:
            run_api_server(self)
        finally:
            self.config.cleanup()
