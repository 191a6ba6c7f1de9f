import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, NoReturn, Optional, Tuple

from flask import Flask, abort, jsonify, make_response, request
from flask_cors import CORS

from supportbot.config import load_config
from supportbot.conversation import ChatWidget
from supportbot.resolver import ResponseResolver
from supportbot.scheduling import PollingScheduler
from supportbot.skins import SKINS, get_skin
from supportbot.tracking import load_tracking_records

logger = logging.getLogger(__name__)

DEFAULT_MAX_SESSIONS = 1000


def _error(status: int, message: str) -> NoReturn:
    abort(make_response(jsonify({"error": message}), status))


def _json_body() -> Dict[str, Any]:
    data = request.get_json(force=True, silent=True)
    return data if isinstance(data, dict) else {}


def _text_field(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        _error(400, f"{key!r} must be a string")
    return value


# =========================
# Flask app
# =========================
def create_app(
    config_path: Optional[str] = None,
    *,
    config: Optional[Dict[str, Any]] = None,
    clock: Callable[[], float] = time.monotonic,
) -> Flask:
    cfg = config if config is not None else load_config(config_path)
    widget_cfg = cfg.get("widget", {})
    default_skin = get_skin(widget_cfg.get("skin")).name
    reply_delay = float(widget_cfg.get("reply_delay_ms", 1500)) / 1000.0

    tracking = load_tracking_records(cfg.get("tracking", {}).get("path"))
    resolvers = {
        name: ResponseResolver(skin, tracking if skin.tracks_orders else None)
        for name, skin in SKINS.items()
    }

    # Per-session widgets. In-memory only, lost on restart; the least recently
    # used session is disposed once max_sessions is exceeded.
    max_sessions = int(cfg.get("server", {}).get("max_sessions", DEFAULT_MAX_SESSIONS))
    scheduler = PollingScheduler(clock)
    sessions: "OrderedDict[str, ChatWidget]" = OrderedDict()
    lock = threading.Lock()

    def get_widget(session_id: str) -> ChatWidget:
        if session_id in sessions:
            sessions.move_to_end(session_id)
            return sessions[session_id]

        try:
            skin = get_skin(request.args.get("skin") or default_skin)
        except ValueError as e:
            _error(404, str(e))
        sessions[session_id] = ChatWidget(resolvers[skin.name], scheduler, reply_delay=reply_delay)
        logger.info("Created %s widget session %s", skin.name, session_id)
        while len(sessions) > max_sessions:
            evicted_id, evicted = sessions.popitem(last=False)
            evicted.dispose()
            logger.info("Evicted widget session %s", evicted_id)
        return sessions[session_id]

    def submit(widget: ChatWidget, text: Optional[str]) -> Tuple[Any, int]:
        pending_text = widget.input_text if text is None else text
        if widget.is_typing and pending_text.strip():
            return jsonify(widget.snapshot()), 409
        accepted = widget.submit(text)
        return jsonify(widget.snapshot()), 202 if accepted else 200

    app = Flask(__name__)
    CORS(app, origins=cfg.get("server", {}).get("cors_origins") or ["*"])

    @app.get("/health")
    def health():
        return jsonify({"ok": True, "skin": default_skin, "tracking_loaded": len(tracking)})

    @app.post("/chat")
    def chat():
        data = _json_body()
        message = (_text_field(data, "message") or "").strip()
        skin_name = (_text_field(data, "skin") or default_skin).strip().lower()

        if skin_name not in resolvers:
            _error(404, f"Unknown skin {skin_name!r}")
        if not message:
            return jsonify({"reply": "Please type a message.", "skin": skin_name})

        return jsonify({"reply": resolvers[skin_name].resolve(message), "skin": skin_name})

    @app.get("/widget/<session_id>")
    def widget_state(session_id: str):
        with lock:
            widget = get_widget(session_id)
            scheduler.run_pending()
            return jsonify(widget.snapshot())

    @app.post("/widget/<session_id>/messages")
    def widget_message(session_id: str):
        data = _json_body()
        text = _text_field(data, "text")
        with lock:
            scheduler.run_pending()
            return submit(get_widget(session_id), text)

    @app.post("/widget/<session_id>/input")
    def widget_input(session_id: str):
        data = _json_body()
        text = _text_field(data, "text")
        with lock:
            scheduler.run_pending()
            widget = get_widget(session_id)
            widget.set_input(text or "")
            return jsonify(widget.snapshot())

    @app.post("/widget/<session_id>/quick-actions/<key>")
    def widget_quick_action(session_id: str, key: str):
        with lock:
            scheduler.run_pending()
            widget = get_widget(session_id)
            try:
                query = widget.skin.quick_action(key).query
            except KeyError as e:
                _error(404, str(e.args[0]))
            return submit(widget, query)

    @app.post("/widget/<session_id>/toggle-open")
    def widget_toggle_open(session_id: str):
        with lock:
            scheduler.run_pending()
            widget = get_widget(session_id)
            widget.toggle_open()
            return jsonify(widget.snapshot())

    @app.post("/widget/<session_id>/toggle-minimize")
    def widget_toggle_minimize(session_id: str):
        with lock:
            scheduler.run_pending()
            widget = get_widget(session_id)
            widget.toggle_minimize()
            return jsonify(widget.snapshot())

    @app.delete("/widget/<session_id>")
    def widget_close(session_id: str):
        with lock:
            widget = sessions.pop(session_id, None)
            if widget is not None:
                widget.dispose()
                logger.info("Disposed widget session %s", session_id)
        return "", 204

    return app


if __name__ == "__main__":
    # Run: python app.py
    settings = load_config()
    logging.basicConfig(
        level=str(settings.get("logging", {}).get("level", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    create_app(config=settings).run(host="127.0.0.1", port=5000, debug=True)
