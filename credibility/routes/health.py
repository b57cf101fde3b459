from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from credibility.extensions import db

health_bp = Blueprint('health', __name__)


@health_bp.route('/health')
def health():
    return jsonify({
        'status': 'ok',
        'calculation_version': current_app.config.get('SCORE_CALCULATION_VERSION'),
    })


@health_bp.route('/ready')
def ready():
    """Ready once the score store answers; stale scores stay readable either way."""
    try:
        db.session.execute(text('SELECT 1'))
        db_ok = True
    except Exception:
        db.session.rollback()
        db_ok = False

    status = 'ready' if db_ok else 'not_ready'
    code = 200 if db_ok else 503
    return jsonify({'status': status, 'db': db_ok}), code
