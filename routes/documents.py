"""
Document API.

Every route is scoped to the logged-in user. Form navigation state for an
open document is kept in the Flask session under ``form_sessions``.
"""

import logging

from flask import Blueprint, jsonify, request, session
from flask_login import login_required, current_user

from services.documents import DocumentEditor, DocumentLifecycle, ValidationError

logger = logging.getLogger(__name__)

documents_bp = Blueprint('documents', __name__, url_prefix='/api/documents')

FORM_SESSIONS_KEY = 'form_sessions'


def get_lifecycle():
    return DocumentLifecycle(current_user.id)


def get_json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def load_form_state(document_id):
    return session.get(FORM_SESSIONS_KEY, {}).get(str(document_id))


def store_form_state(document_id, state):
    states = dict(session.get(FORM_SESSIONS_KEY, {}))
    if state is None:
        states.pop(str(document_id), None)
    else:
        states[str(document_id)] = state
    session[FORM_SESSIONS_KEY] = states


def open_editor(document_id):
    return DocumentEditor.open(get_lifecycle(), document_id, form_state=load_form_state(document_id))


def step_response(editor, status=200):
    store_form_state(editor.document_id, editor.form.to_dict())
    return jsonify({
        'success': True,
        'document_id': editor.document_id,
        'form': editor.form.describe(),
        'filled_data': editor.snapshot(),
    }), status


# =============================================================================
# CRUD
# =============================================================================

@documents_bp.route('', methods=['POST'])
@login_required
def create_document():
    data = get_json_body()
    document = get_lifecycle().create(
        data.get('template_id'),
        initial_answers=data.get('filled_data'),
        title=data.get('title')
    )
    return jsonify({'success': True, 'document': document.to_dict(include_template=True)}), 201


@documents_bp.route('', methods=['GET'])
@login_required
def list_documents():
    documents = get_lifecycle().list(
        status=request.args.get('status') or None,
        search=request.args.get('search', '').strip() or None
    )
    return jsonify({
        'success': True,
        'documents': [d.to_dict(include_template=True) for d in documents]
    })


@documents_bp.route('/<int:document_id>', methods=['GET'])
@login_required
def get_document(document_id):
    lifecycle = get_lifecycle()
    document = lifecycle.get(document_id)
    data = document.to_dict()
    data['template'] = lifecycle.template_for(document).to_dict()
    return jsonify({'success': True, 'document': data})


@documents_bp.route('/<int:document_id>', methods=['PATCH'])
@login_required
def update_document(document_id):
    data = get_json_body()
    document = get_lifecycle().update(
        document_id,
        answers=data.get('filled_data'),
        title=data.get('title'),
        status=data.get('status')
    )
    return jsonify({'success': True, 'document': document.to_dict(include_template=True)})


@documents_bp.route('/<int:document_id>', methods=['DELETE'])
@login_required
def delete_document(document_id):
    get_lifecycle().delete(document_id)
    store_form_state(document_id, None)
    return jsonify({'success': True})


# =============================================================================
# PREVIEW / EXPORT
# =============================================================================

@documents_bp.route('/<int:document_id>/preview', methods=['GET'])
@login_required
def preview_document(document_id):
    preview = get_lifecycle().preview(document_id)
    return jsonify({'success': True, 'preview': preview.to_dict()})


@documents_bp.route('/<int:document_id>/export', methods=['POST'])
@login_required
def export_document(document_id):
    lifecycle = get_lifecycle()
    artifact_ref = lifecycle.request_export(document_id)
    document = lifecycle.get(document_id)
    return jsonify({
        'success': True,
        'artifact_ref': artifact_ref,
        'document': document.to_dict()
    })


# =============================================================================
# FORM STEPS
# =============================================================================

@documents_bp.route('/<int:document_id>/steps', methods=['GET'])
@login_required
def get_steps(document_id):
    return step_response(open_editor(document_id))


@documents_bp.route('/<int:document_id>/steps/next', methods=['POST'])
@login_required
def next_step(document_id):
    """
    Validate the current step against the posted answers, save, then advance.

    Posted ``filled_data`` is merged over the saved answers. On a failed
    step nothing is saved and the response lists the failing fields.
    """
    data = get_json_body()
    editor = open_editor(document_id)
    if data.get('filled_data') is not None:
        answers = data['filled_data']
        if not isinstance(answers, dict):
            raise ValidationError("filled_data must be an object", field='filled_data')
        editor.update_answers(answers)

    try:
        editor.next()
    finally:
        store_form_state(document_id, editor.form.to_dict())
    return step_response(editor)


@documents_bp.route('/<int:document_id>/steps/back', methods=['POST'])
@login_required
def previous_step(document_id):
    editor = open_editor(document_id)
    editor.back()
    return step_response(editor)


@documents_bp.route('/<int:document_id>/steps/<int:step_number>', methods=['POST'])
@login_required
def jump_to_step(document_id, step_number):
    editor = open_editor(document_id)
    editor.go_to(step_number)
    return step_response(editor)
