"""
Matchday - Tournament progression engine

Entry point for the application.
"""

import logging
import sys

from PySide6.QtCore import QCoreApplication

from config import init_config, configure_logging, APP_NAME, APP_AUTHOR, APP_VERSION, PATHS

logger = logging.getLogger(__name__)


def main() -> int:
    """Main entry point for Matchday."""
    # Initialize configuration and directories
    init_config()
    configure_logging()

    # Create application
    app = QCoreApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)
    app.setOrganizationName(APP_AUTHOR)

    # Wire store, bus and reactions
    from app import MatchdayApp
    matchday = MatchdayApp(f"sqlite:///{PATHS.database}")
    app.aboutToQuit.connect(matchday.shutdown)
    logger.info("%s %s ready (database %s)", APP_NAME, APP_VERSION, PATHS.database)

    # Run event loop
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
