import threading
import hmac
from functools import wraps
from flask import Blueprint, jsonify, request, current_app
from credibility.models.score import SCORE_TRIGGERS
from credibility.pipeline.orchestrator import RecalculationError, recalculate, run_sweep

admin_bp = Blueprint('admin', __name__)
_sweep_thread = None
_sweep_trigger_lock = threading.Lock()


def _extract_admin_token():
    auth_header = request.headers.get('Authorization', '')
    if auth_header.lower().startswith('bearer '):
        return auth_header.split(' ', 1)[1].strip()
    return (request.headers.get('X-Admin-Key') or '').strip()


def require_admin_key(func):
    """Require ADMIN_API_KEY for all admin endpoints."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        configured_key = current_app.config.get('ADMIN_API_KEY')
        if not configured_key:
            return jsonify({'error': 'Admin API is disabled: ADMIN_API_KEY is not configured'}), 503

        presented_key = _extract_admin_token()
        if not presented_key or not hmac.compare_digest(presented_key, configured_key):
            return jsonify({'error': 'Unauthorized'}), 401

        return func(*args, **kwargs)

    return wrapper


@admin_bp.route('/recalculate', methods=['POST'])
@require_admin_key
def trigger_recalculation():
    """Recalculate hash -> record -> user scores for one event."""
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'JSON body required'}), 400

    required = ['record_hash', 'record_id', 'user_id']
    missing = [f for f in required if not data.get(f)]
    if missing:
        return jsonify({'error': f'Missing fields: {missing}'}), 400

    trigger = data.get('trigger', 'manual')
    if trigger not in SCORE_TRIGGERS:
        return jsonify({'error': f'Invalid trigger: {trigger}', 'valid': list(SCORE_TRIGGERS)}), 400

    try:
        result = recalculate(data['record_hash'], data['record_id'], data['user_id'], trigger=trigger)
    except RecalculationError as e:
        return jsonify({'error': str(e), 'step': e.step, 'retry': True}), 503

    return jsonify(result.to_dict())


@admin_bp.route('/sweep', methods=['POST'])
@require_admin_key
def trigger_sweep():
    """Start a full recalculation sweep in the background."""
    global _sweep_thread

    app = current_app._get_current_object()

    def run_in_thread():
        with app.app_context():
            run_sweep()

    with _sweep_trigger_lock:
        if _sweep_thread and _sweep_thread.is_alive():
            return jsonify({'error': 'Sweep already running'}), 409

        _sweep_thread = threading.Thread(target=run_in_thread, daemon=True)
        _sweep_thread.start()

    return jsonify({'status': 'triggered'}), 202
