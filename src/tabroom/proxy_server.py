#!/usr/bin/env python3
"""
Tabroom proxy HTTP server.

One POST route per operation. Bodies are JSON; responses are the operation's
fields on success or {"error": message} with a non-2xx status on failure.
Every request gets its own requests.Session, so nothing is shared between
users beyond the token each caller sends.
"""

import argparse
import logging
from typing import Any, Callable, Dict, Optional

import requests
from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, MethodNotAllowed

from get_judge_paradigm import get_judge
from get_past_results import get_past_results
from get_pairings import get_pairings
from get_rounds import get_ballots, get_my_rounds
from get_tournaments import get_entries, get_my_tournaments, get_upcoming
from login_session import authenticate
from tabroom_errors import TabroomError, ValidationError

logger = logging.getLogger(__name__)

ENDPOINTS = [
    "POST /login : { email, password }",
    "POST /my-tournaments : { token }",
    "POST /pairings : { token, tournId, eventId?, roundId? }",
    "POST /judge : { judgeId? | judgeName?, token? }",
    "POST /ballots : { token, tournId, entryId?, entryName?, personName? }",
    "POST /my-rounds : { token, tournId, personName? }",
    "POST /entries : { token }",
    "POST /upcoming : {}",
    "POST /past-results : { personId?, token? }",
]


def _param(data: Dict[str, Any], name: str, alias: Optional[str] = None) -> Optional[str]:
    """String value of a camelCase key (or its snake_case alias), None if blank."""
    value = data.get(name)
    if value in (None, "") and alias:
        value = data.get(alias)
    if value in (None, ""):
        return None
    return str(value).strip() or None


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None and not request.get_data():
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON body")
    return data


def create_app(session_factory: Callable[[], requests.Session] = requests.Session) -> Flask:
    """Build the Flask app; `session_factory` makes one HTTP session per request."""
    app = Flask(__name__)
    CORS(app)

    def run(operation: Callable[..., Any], *args, **kwargs):
        session = session_factory()
        try:
            return jsonify(operation(session, *args, **kwargs))
        finally:
            session.close()

    @app.errorhandler(TabroomError)
    def handle_tabroom_error(e: TabroomError):
        logger.info("%s on %s: %s", type(e).__name__, request.path, e.message)
        return jsonify({"error": e.message}), e.status

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        if isinstance(e, MethodNotAllowed):
            return jsonify({"error": "Only POST requests are supported"}), 405
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error on %s", request.path)
        return jsonify({"error": "Internal error"}), 500

    @app.route("/", methods=["GET", "POST"])
    def index():
        return jsonify({"endpoints": ENDPOINTS})

    @app.route("/login", methods=["POST"])
    def login():
        data = _json_body()
        email = _param(data, "email")
        session = session_factory()
        try:
            token = authenticate(session, email, data.get("password") or "")
        finally:
            session.close()
        logger.info("Login ok for person %s", token.person_id or "?")
        return jsonify(
            {
                "success": True,
                "token": token.token,
                "personId": token.person_id,
                "name": token.display_name,
                "email": email,
            }
        )

    @app.route("/my-tournaments", methods=["POST"])
    def my_tournaments():
        data = _json_body()
        return run(get_my_tournaments, _param(data, "token", "session"))

    @app.route("/pairings", methods=["POST"])
    def pairings():
        data = _json_body()
        return run(
            get_pairings,
            _param(data, "token", "session"),
            _param(data, "tournId", "tourn_id"),
            event_id=_param(data, "eventId", "event_id"),
            round_id=_param(data, "roundId", "round_id"),
        )

    @app.route("/judge", methods=["POST"])
    def judge():
        data = _json_body()
        return run(
            get_judge,
            judge_id=_param(data, "judgeId", "judge_id"),
            judge_name=_param(data, "judgeName", "judge_name"),
            token=_param(data, "token", "session"),
        )

    @app.route("/ballots", methods=["POST"])
    def ballots():
        data = _json_body()
        return run(
            get_ballots,
            _param(data, "token", "session"),
            _param(data, "tournId", "tourn_id"),
            entry_id=_param(data, "entryId", "entry_id"),
            entry_name=_param(data, "entryName", "entry_name"),
            person_name=_param(data, "personName", "person_name"),
            debug=bool(data.get("debug")),
        )

    @app.route("/my-rounds", methods=["POST"])
    def my_rounds():
        data = _json_body()
        return run(
            get_my_rounds,
            _param(data, "token", "session"),
            _param(data, "tournId", "tourn_id"),
            person_name=_param(data, "personName", "person_name"),
            debug=bool(data.get("debug")),
        )

    @app.route("/entries", methods=["POST"])
    def entries():
        data = _json_body()
        return run(get_entries, _param(data, "token", "session"))

    @app.route("/upcoming", methods=["POST"])
    def upcoming():
        return run(get_upcoming)

    @app.route("/past-results", methods=["POST"])
    def past_results():
        data = _json_body()
        return run(
            get_past_results,
            person_id=_param(data, "personId", "person_id"),
            token=_param(data, "token", "session"),
        )

    return app


def main():
    parser = argparse.ArgumentParser(description="Serve the Tabroom proxy over HTTP")
    parser.add_argument("--host", type=str, default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    parser.add_argument("--port", "-p", type=int, default=8080, help="Port (default: 8080)")
    parser.add_argument("--debug", action="store_true", help="Run Flask in debug mode")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument("--quiet", "-q", action="store_true", help="Only log warnings and errors")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.WARNING if args.quiet else getattr(logging, args.log_level),
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    app = create_app()
    logger.info("Serving Tabroom proxy on %s:%d", args.host, args.port)
    app.run(host=args.host, port=args.port, debug=args.debug)
    return 0


if __name__ == "__main__":
    exit(main())
