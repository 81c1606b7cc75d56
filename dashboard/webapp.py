import logging
from datetime import datetime
from typing import Callable, Optional

from flask import Flask, Response, jsonify

from dashboard.config import Settings
from dashboard.errors import DirectoryError
from dashboard.providers.base import DeviceDirectory
from dashboard.providers.teamviewer_http import TeamViewerDirectory
from dashboard.render import render

logger = logging.getLogger(__name__)


def local_now() -> datetime:
    return datetime.now().astimezone()


def create_app(settings: Settings, directory: Optional[DeviceDirectory] = None,
               clock: Callable[[], datetime] = local_now) -> Flask:
    """Build the dashboard app.

    ``settings`` and ``directory`` are created once here and only read by
    request handlers, so concurrent requests share them without locking.
    """
    if directory is None:
        directory = TeamViewerDirectory(api_url=settings.api_url, timeout=settings.request_timeout)

    if settings.static_dir:
        app = Flask(__name__, static_folder=settings.static_dir, static_url_path="/static")
    else:
        app = Flask(__name__)

    token = settings.teamviewer_token

    @app.errorhandler(DirectoryError)
    def directory_failed(exc: DirectoryError):
        return Response(exc.describe(), status=500, mimetype="text/plain")

    @app.route('/', methods=['GET'])
    def index():
        devices = directory.fetch_devices(token)
        page = render(devices, clock())
        return Response(page, status=200, mimetype="text/html")

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({'ok': True})

    return app
