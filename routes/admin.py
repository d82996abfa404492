import logging

from flask import Blueprint, jsonify
from flask_login import login_required

from services.metrics_service import MetricsService

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__, url_prefix='/api/admin')


@admin_bp.route('/metrics')
@login_required
def metrics():
    return jsonify({'success': True, 'metrics': MetricsService().get_metrics()})
