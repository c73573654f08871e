"""
Shuffle history routes: the store side of the history client contract.

Record plays, serve history snapshots, reset sessions, report statistics,
list and clear a user's play history.
"""

import logging

from flask import jsonify, request

from neosynth.routes import (
    main,
    json_error,
    json_success,
    validate_json,
    validate_query,
    require_user_and_db,
)
from neosynth.services import PlayHistoryService
from neosynth.schemas import (
    RecordPlayRequest,
    ResetSessionRequest,
    HistoryQueryParams,
    TrackListQueryParams,
    HistoryEntryPayload,
    RecordPlayResponse,
    ShuffleStatistics,
    ClearHistoryResponse,
)

logger = logging.getLogger(__name__)


@main.route("/api/users/<user_id>/shuffle/play", methods=["POST"])
@require_user_and_db
def record_play(user_id):
    """Record that a track started playing."""
    parsed, err = validate_json(RecordPlayRequest)
    if err:
        return err

    entry = PlayHistoryService.record_play(
        user_id=user_id,
        track_url=parsed.track_url,
        track_name=parsed.track_name,
        session_id=parsed.session_id,
    )

    logger.info(
        "Play recorded for '%s' (user %s, play count %s)",
        entry.track_name,
        user_id,
        entry.play_count,
    )

    payload = RecordPlayResponse(
        play_count=entry.play_count,
        last_played=(
            entry.last_played.isoformat() if entry.last_played else None
        ),
    ).model_dump(by_alias=True)
    return json_success(payload.pop("message"), **payload)


@main.route("/api/users/<user_id>/shuffle/history", methods=["GET"])
@require_user_and_db
def get_play_history(user_id):
    """Return history entries for the requested tracks."""
    params, err = validate_query(HistoryQueryParams)
    if err:
        return err

    history = PlayHistoryService.get_play_history(
        user_id, params.track_urls
    )

    return jsonify({
        url: HistoryEntryPayload(**entry).model_dump(by_alias=True)
        for url, entry in history.items()
    })


@main.route("/api/users/<user_id>/shuffle/reset-session", methods=["POST"])
@require_user_and_db
def reset_session(user_id):
    """Clear session flags and start the given session."""
    # An empty body is allowed: the store then forgets the session id.
    # Schema errors are turned into 400s by the global handler.
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return json_error("Request body must be a JSON object.", 400)
    parsed = ResetSessionRequest(**data)

    touched = PlayHistoryService.reset_session(user_id, parsed.session_id)

    logger.info(
        "Shuffle session reset for user %s (%d records)", user_id, touched
    )
    return json_success(
        "Session reset successfully", resetCount=touched
    )


@main.route("/api/users/<user_id>/shuffle/stats", methods=["GET"])
@require_user_and_db
def get_statistics(user_id):
    """Return aggregate play statistics for the user."""
    stats = ShuffleStatistics(**PlayHistoryService.get_statistics(user_id))
    return jsonify(stats.to_wire())


@main.route("/api/users/<user_id>/shuffle/tracks", methods=["GET"])
@require_user_and_db
def list_tracks(user_id):
    """List history records ordered by play count, recency or name."""
    params, err = validate_query(TrackListQueryParams)
    if err:
        return err

    rows = PlayHistoryService.get_tracks(
        user_id,
        sort_by=params.sort_by,
        order=params.order,
        limit=params.limit,
    )

    return jsonify([
        {
            "trackUrl": row.track_url,
            "trackName": row.track_name,
            "playCount": row.play_count,
            "lastPlayed": (
                row.last_played.isoformat() if row.last_played else None
            ),
            "playedInCurrentSession": bool(row.played_in_current_session),
        }
        for row in rows
    ])


@main.route("/api/users/<user_id>/shuffle/history", methods=["DELETE"])
@require_user_and_db
def clear_play_history(user_id):
    """Delete all play history of the user."""
    deleted = PlayHistoryService.clear_history(user_id)

    logger.info(
        "Play history cleared for user %s: %d records deleted",
        user_id,
        deleted,
    )

    payload = ClearHistoryResponse(deleted_count=deleted).model_dump(
        by_alias=True
    )
    return json_success(payload.pop("message"), **payload)
