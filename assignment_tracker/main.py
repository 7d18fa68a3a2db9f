import argparse
import logging
import sys
from assignment_tracker.core.app import TrackerApp


def setup_basic_logging():
    """Setup basic stdout logging before config is loaded"""
    root_logger = logging.getLogger()
    if not root_logger.handlers:  # Only add handler if none exists
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
        ))
        root_logger.addHandler(handler)
        root_logger.setLevel(logging.DEBUG)
        logging.debug("Basic logging initialized")


def main(argv=None):
    setup_basic_logging()

    parser = argparse.ArgumentParser(description='Assignment Tracker')
    parser.add_argument('--config',
                        help='Path to config file (default: ~/.assignment_tracker/config.yaml)')
    parser.add_argument('--db-url',
                        help='SQLAlchemy database URL (overrides database.path in config)')
    parser.add_argument('--watch-config', action='store_true',
                        help='Reload config.yaml when it changes')

    args = parser.parse_args(argv)

    app = TrackerApp(config_path=args.config, db_url=args.db_url, watch_config=args.watch_config)
    app.run()


if __name__ == "__main__":
    main()
