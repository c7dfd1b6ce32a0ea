# supply_stats/api.py
"""
Read-only HTTP interface over the latest supply snapshot.

Amount endpoints answer in display units (base amount / 10**decimals) as plain
text; `/` returns everything as one JSON object. Until the first refresh
succeeds the endpoints answer 503, except /circulating-supply which falls back
to the value persisted by a previous run.
"""
from datetime import datetime, timezone

from flask import Flask, Response, jsonify, request

from . import __version__
from .snapshot import format_amount

NOT_AVAILABLE = "not yet available"


def _text(value) -> Response:
    return Response(str(value), mimetype="text/plain")


def _unavailable() -> Response:
    return Response(NOT_AVAILABLE, status=503, mimetype="text/plain")


def create_app(store, settings):
    """
    Create the Flask application.

    Args:
        store: SnapshotStore the refresh loop publishes into
        settings: Settings (denom and display decimals are read from it)
    """
    app = Flask(__name__)
    app.startup_time = datetime.now(timezone.utc)
    decimals = settings.display_decimals

    def amount_route(field):
        snapshot = store.current()
        if snapshot is None:
            return _unavailable()
        return _text(format_amount(getattr(snapshot, field), decimals))

    @app.before_request
    def reject_non_get_requests():
        if request.method not in ("GET", "HEAD"):
            return jsonify({"error": "Method Not Allowed",
                            "message": "This service is read-only."}), 405

    @app.route("/", methods=["GET"])
    def summary():
        snapshot = store.current()
        if snapshot is None:
            return jsonify({"error": NOT_AVAILABLE}), 503
        return jsonify({
            "apr": snapshot.apr,
            "bondedRatio": snapshot.bonded_ratio,
            "circulatingSupply": format_amount(snapshot.circulating_supply, decimals),
            "communityPool": format_amount(snapshot.community_pool_amount, decimals),
            "denom": settings.display_denom,
            "totalStaked": format_amount(snapshot.total_staked, decimals),
            "totalSupply": format_amount(snapshot.total_supply, decimals),
            "updatedAt": snapshot.computed_at.isoformat(),
        })

    @app.route("/apr", methods=["GET"])
    def apr():
        snapshot = store.current()
        if snapshot is None or snapshot.apr is None:
            return _unavailable()
        return _text(snapshot.apr)

    @app.route("/bonded-ratio", methods=["GET"])
    def bonded_ratio():
        snapshot = store.current()
        if snapshot is None or snapshot.bonded_ratio is None:
            return _unavailable()
        return _text(snapshot.bonded_ratio)

    @app.route("/circulating-supply", methods=["GET"])
    def circulating_supply():
        value = store.circulating_supply()
        if value is None:
            return _unavailable()
        return _text(format_amount(value, decimals))

    @app.route("/total-staked", methods=["GET"])
    def total_staked():
        return amount_route("total_staked")

    @app.route("/total-supply", methods=["GET"])
    def total_supply():
        return amount_route("total_supply")

    @app.route("/community-pool", methods=["GET"])
    def community_pool():
        return amount_route("community_pool_amount")

    @app.route("/denom", methods=["GET"])
    def denom():
        return _text(settings.display_denom)

    @app.route("/health", methods=["GET"])
    def health():
        snapshot = store.current()
        return jsonify({
            "status": "ok",
            "version": __version__,
            "uptime_seconds": (datetime.now(timezone.utc) - app.startup_time).total_seconds(),
            "snapshot_available": snapshot is not None,
            "last_updated": snapshot.computed_at.isoformat() if snapshot else None,
        }), 200

    return app
