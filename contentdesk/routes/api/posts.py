"""Custom post endpoints: statistics and bulk publishing."""
from flask import jsonify

from contentdesk.services.post_service import get_post_service
from . import api_bp


@api_bp.route("/posts/stats")
def post_stats():
    """
    Count posts by status.

    Returns:
        JSON ``{total, published, draft, timestamp}``
    """
    return jsonify(get_post_service().get_stats())


@api_bp.route("/posts/publish-all", methods=["POST"])
def publish_all_posts():
    """
    Publish every draft post (up to the configured batch size).

    Returns:
        JSON ``{message, publishedCount, failedCount, failures}``; 207 when
        any post could not be published
    """
    batch = get_post_service().publish_all_drafts()

    published = len(batch.succeeded)
    message = f"Published {published} post{'s' if published != 1 else ''}"
    if batch.has_failures:
        message += f", {len(batch.failures)} failed"
        if batch.stopped_early:
            message += " (stopped at first failure)"

    response = jsonify({
        "message": message,
        "publishedCount": published,
        "failedCount": len(batch.failures),
        "failures": batch.failures_as_dicts(),
    })
    return response, 207 if batch.has_failures else 200
