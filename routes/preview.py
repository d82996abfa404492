from flask import Blueprint, jsonify, request

from services.documents import TemplateRenderer, ValidationError
from services.documents.renderer import TEXT_PLACEHOLDER
from services.documents.lifecycle import check_answers

preview_bp = Blueprint('preview', __name__, url_prefix='/api')


@preview_bp.route('/preview', methods=['POST'])
def preview():
    """Render an unsaved body against answers; nothing is persisted."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    body = data.get('body')
    if not isinstance(body, str):
        raise ValidationError("body must be a string", field='body')
    answers = check_answers(data.get('filled_data'))

    html = bool(data.get('html', False))
    if html:
        result = TemplateRenderer.preview(body, answers)
    else:
        result = TemplateRenderer.preview(body, answers, placeholder=TEXT_PLACEHOLDER)

    return jsonify({'success': True, 'preview': result.to_dict()})
