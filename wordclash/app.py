# wordclash/app.py
from flask import Flask
from flask_socketio import SocketIO

from . import init_wordclash
from .cards import CardGenerator
from .config import Settings
from .log import get_logger

logger = get_logger(__name__)


def create_app(settings=None, card_source=None, **socketio_options):
    settings = settings or Settings.from_env()
    app = Flask(__name__)
    socketio = SocketIO(app, async_mode="threading", cors_allowed_origins="*", **socketio_options)
    if card_source is None:
        card_source = CardGenerator.from_settings(settings)
    init_wordclash(app, socketio, card_source=card_source)
    return app, socketio


def main():
    settings = Settings.from_env()
    app, socketio = create_app(settings)
    logger.info("Server running on port %s", settings.port)
    socketio.run(app, host=settings.host, port=settings.port, debug=settings.debug, allow_unsafe_werkzeug=True)


if __name__ == "__main__":
    main()
