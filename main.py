"""
Main Application Runner
Starts the attendance tracker web server
"""
import logging
import sys
from attendance_tracker.config.settings import Config
from attendance_tracker.utils.logger import setup_logging

logger = logging.getLogger(__name__)


def main():
    """Main application entry point."""
    setup_logging(Config.LOG_LEVEL, Config.LOG_DIR)

    logger.info("=== Attendance Tracker ===")

    from attendance_tracker.app import create_app
    try:
        app = create_app()
    except ValueError as e:
        logger.error(f"Cannot start: {e}")
        sys.exit(1)

    if not Config.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY not set - AI search will report an error")

    logger.info(f"Serving on http://{Config.HOST}:{Config.PORT}")
    app.run(host=Config.HOST, port=Config.PORT, debug=Config.DEBUG)


if __name__ == "__main__":
    main()
