import logging
import sys

from dotenv import load_dotenv

from dashboard.config import Settings
from dashboard.errors import StartupError
from dashboard.listener import resolve_listener
from dashboard.webapp import create_app

logger = logging.getLogger(__name__)


def main() -> int:
    load_dotenv()
    try:
        settings = Settings.from_env()
    except StartupError as exc:
        logging.basicConfig(format='%(asctime)s [%(levelname)s] %(message)s', level=logging.INFO)
        logger.error("Cannot start: %s", exc)
        return 1

    logging.basicConfig(
        format='%(asctime)s [%(levelname)s] %(message)s',
        level=getattr(logging, settings.log_level, logging.INFO),
    )

    app = create_app(settings)
    listener = resolve_listener(settings.bind_host, settings.bind_port)
    try:
        server = listener.make_server(app)
    except StartupError as exc:
        logger.error("Cannot start: %s", exc)
        return 1
    logger.info("Serving device dashboard on %s:%s", *server.server_address[:2])
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
