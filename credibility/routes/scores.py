from flask import Blueprint, jsonify, request
from credibility.services.store_gateway import ScoreStoreGateway

scores_bp = Blueprint('scores', __name__)
gateway = ScoreStoreGateway()


@scores_bp.route('/hash/<record_hash>')
def hash_score(record_hash):
    """Current score for one content hash."""
    score = gateway.get_hash_score(record_hash)
    if not score:
        return jsonify({'error': f'No score for hash {record_hash}'}), 404
    return jsonify(score.to_dict())


@scores_bp.route('/record/<record_id>')
def record_score(record_id):
    """Current aggregate score for a logical record."""
    score = gateway.get_record_score(record_id)
    if not score:
        return jsonify({'error': f'No score for record {record_id}'}), 404
    return jsonify(score.to_dict())


@scores_bp.route('/user/<user_id>')
def user_score(user_id):
    score = gateway.get_user_score(user_id)
    if not score:
        return jsonify({'error': f'No score for user {user_id}'}), 404
    return jsonify(score.to_dict())


@scores_bp.route('/user/<user_id>/history')
def user_score_history(user_id):
    """Score history for a user (paginated, newest first)."""
    page = request.args.get('page', 1, type=int)
    per_page = request.args.get('per_page', 20, type=int)

    pagination = gateway.get_score_history(user_id).paginate(
        page=page, per_page=per_page, max_per_page=100, error_out=False
    )

    return jsonify({
        'history': [h.to_dict() for h in pagination.items],
        'total': pagination.total,
        'page': page,
        'per_page': pagination.per_page,
    })
