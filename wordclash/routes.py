# wordclash/routes.py
from flask import Blueprint, current_app, jsonify, request

wordclash_bp = Blueprint("wordclash", __name__)


@wordclash_bp.route("/wordclash/health")
def health():
    matchmaker = current_app.extensions["wordclash"]["matchmaker"]
    return jsonify({
        "status": "ok",
        "queued": len(matchmaker.queue),
        "rooms": len(matchmaker.rooms),
    })


@wordclash_bp.route("/api/generate-card", methods=["POST"])
def generate_card():
    data = request.get_json(silent=True) or {}
    word = str(data.get("word") or "").strip()
    if not word:
        return jsonify({"error": "Word is required"}), 400
    role = "support" if data.get("role") == "support" else "attack"
    card_source = current_app.extensions["wordclash"]["card_source"]
    card = card_source(word, role)
    return jsonify({"card": card.to_payload()})
