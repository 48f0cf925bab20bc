# wordclash/__init__.py
from .routes import wordclash_bp
from .sockets import register_wordclash_socket_handlers
from .state import Matchmaker


def init_wordclash(app, socketio, matchmaker=None, card_source=None):
    if matchmaker is None:
        matchmaker = Matchmaker()
    if card_source is None:
        from .cards import CardGenerator
        from .config import Settings
        card_source = CardGenerator.from_settings(Settings.from_env())
    app.extensions["wordclash"] = {"matchmaker": matchmaker, "card_source": card_source}
    app.register_blueprint(wordclash_bp)
    register_wordclash_socket_handlers(socketio, matchmaker, card_source)
    return matchmaker
