from __future__ import annotations

import logging
import os
import sys
import threading
import uuid
from collections import OrderedDict
from typing import Any, Callable, Dict, List, Optional, Tuple

from flask import Flask, jsonify, request, send_from_directory

# Ensure package imports work when executed directly from repo root or as module
if __package__ in (None, ""):
    sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

try:
    from .game import (  # type: ignore
        DEFAULT_DIFFICULTY,
        DEFAULT_TITLE,
        ConfigurationError,
        GameEngine,
        Scheduler,
        block_completed,
        new_engine,
    )
except ImportError:
    from game import (  # type: ignore
        DEFAULT_DIFFICULTY,
        DEFAULT_TITLE,
        ConfigurationError,
        GameEngine,
        Scheduler,
        block_completed,
        new_engine,
    )

logger = logging.getLogger(__name__)

MAX_GAMES = int(os.getenv("MEMORY_GAME_MAX_SESSIONS", "500"))

STATIC_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "static"))
app = Flask(__name__, static_url_path="/static", static_folder=STATIC_DIR)

# Tests replace this to drive engines from a ManualClock.
make_scheduler: Callable[[], Scheduler] = Scheduler


class GameSlot:
    """One hosted engine plus the completion messages not yet handed to its page."""

    def __init__(self, game_id: str, engine: GameEngine) -> None:
        self.game_id = game_id
        self.engine = engine
        # Flask may serve requests on several threads; the engine itself is single-threaded.
        self.lock = threading.Lock()
        self.outbox: List[Dict[str, Any]] = []
        block_completed.connect(self._on_completed, sender=engine, weak=False)

    def _on_completed(self, sender: Any, record: Any = None, **_extra: Any) -> None:
        self.outbox.append(record.to_dict())

    def take_completion(self) -> Optional[Dict[str, Any]]:
        return self.outbox.pop(0) if self.outbox else None

    def close(self) -> None:
        block_completed.disconnect(self._on_completed, sender=self.engine)


_games: "OrderedDict[str, GameSlot]" = OrderedDict()
_games_lock = threading.Lock()


def _register(engine: GameEngine) -> GameSlot:
    slot = GameSlot(uuid.uuid4().hex, engine)
    with _games_lock:
        _games[slot.game_id] = slot
        while len(_games) > MAX_GAMES:
            _, old = _games.popitem(last=False)
            old.close()
            logger.info("evicted game %s", old.game_id)
    return slot


def _lookup(body: Dict[str, Any]) -> Optional[GameSlot]:
    game_id = body.get("gameId")
    if not isinstance(game_id, str):
        return None
    with _games_lock:
        return _games.get(game_id)


def reset_games() -> None:
    """Drops every hosted game."""
    with _games_lock:
        for slot in _games.values():
            slot.close()
        _games.clear()


def card_to_json(card: Dict[str, Any]) -> Dict[str, Any]:
    revealed = bool(card["revealed"])
    return {
        "id": int(card["id"]),
        # Faces of hidden cards stay on the server.
        "symbol": card["symbol"] if revealed else None,
        "name": card["name"] if revealed else None,
        "face": card["face"],
        "label": card["label"],
        "matched": bool(card["matched"]),
        "flipped": bool(card["flipped"]),
        "revealed": revealed,
        "disabled": bool(card["disabled"]),
    }


def state_to_json(engine: GameEngine) -> Dict[str, Any]:
    v = engine.view()
    return {
        "title": v["title"],
        "difficulty": v["difficulty"],
        "columns": v["columns"],
        "status": v["status"].value,
        "started": v["started"],
        "won": v["won"],
        "moves": v["moves"],
        "matchedPairs": v["matched_pairs"],
        "totalPairs": v["total_pairs"],
        "timeElapsed": v["elapsed"],
        "time": v["time"],
        "score": v["score"],
        "maxScore": v["max_score"],
        "pending": v["pending"],
        "cards": [card_to_json(c) for c in v["cards"]],
    }


def _error(message: str, status: int) -> Tuple[Any, int]:
    return jsonify({"ok": False, "error": message}), status


# ---------- Static routes ----------

@app.get("/")
def index() -> Any:
    return send_from_directory(app.static_folder, "index.html")


@app.get("/main.js")
def main_js() -> Any:
    resp = send_from_directory(app.static_folder, "main.js")
    resp.headers["Content-Type"] = "application/javascript; charset=utf-8"
    return resp


@app.get("/styles.css")
def styles_css() -> Any:
    resp = send_from_directory(app.static_folder, "styles.css")
    resp.headers["Content-Type"] = "text/css; charset=utf-8"
    return resp


# ---------- Game API (used by main.js) ----------

@app.post("/api/new")
def api_new() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    difficulty = str(body.get("difficulty") or DEFAULT_DIFFICULTY).strip().lower()
    title = str(body.get("title") or DEFAULT_TITLE)
    seed = body.get("seed", None)
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        return _error("seed must be an integer", 400)
    try:
        engine = new_engine(difficulty=difficulty, title=title, seed=seed, scheduler=make_scheduler())
    except ConfigurationError as e:
        return _error(str(e), 400)
    slot = _register(engine)
    return jsonify({"ok": True, "gameId": slot.game_id, "state": state_to_json(engine)})


@app.post("/api/select")
def api_select() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    slot = _lookup(body)
    if slot is None:
        return _error("unknown gameId", 404)
    card_id = body.get("cardId")
    if isinstance(card_id, bool) or not isinstance(card_id, int):
        return _error("cardId must be an integer", 400)
    with slot.lock:
        slot.engine.pump()
        slot.engine.select_card(card_id)
        return jsonify({"ok": True, "state": state_to_json(slot.engine), "completion": slot.take_completion()})


@app.post("/api/restart")
def api_restart() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    slot = _lookup(body)
    if slot is None:
        return _error("unknown gameId", 404)
    with slot.lock:
        slot.engine.restart()
        return jsonify({"ok": True, "state": state_to_json(slot.engine)})


@app.post("/api/state")
def api_state() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    slot = _lookup(body)
    if slot is None:
        return _error("unknown gameId", 404)
    with slot.lock:
        slot.engine.pump()
        return jsonify({"ok": True, "state": state_to_json(slot.engine), "completion": slot.take_completion()})


# Entrypoint for "python app.py"
if __name__ == "__main__":
    logging.basicConfig(
        level=os.getenv("MEMORY_GAME_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    debug = os.getenv("FLASK_DEBUG", os.getenv("DEBUG", "0")).lower() in ("1", "true", "yes", "on")
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "5000"))
    app.run(host=host, port=port, debug=debug)
