from flask import Blueprint, jsonify, request

from services.documents import TemplateDefinition, TemplateRepository, CategoryDefinition

templates_bp = Blueprint('templates', __name__, url_prefix='/api')

SUMMARY_KEYS = ('id', 'title', 'description', 'category', 'applicant_type', 'tags', 'popularity_score')


def template_summary(template):
    data = TemplateDefinition.from_model(template).to_dict()
    return {key: data[key] for key in SUMMARY_KEYS}


@templates_bp.route('/categories')
def list_categories():
    categories = [CategoryDefinition.from_model(c).to_dict() for c in TemplateRepository.categories()]
    return jsonify({'success': True, 'categories': categories})


@templates_bp.route('/templates')
def list_templates():
    page = request.args.get('page', 1, type=int)
    per_page = min(request.args.get('per_page', 12, type=int), 50)

    query = TemplateRepository.search_active(
        category=request.args.get('category'),
        applicant_type=request.args.get('type'),
        search=request.args.get('search', '').strip(),
        sort=request.args.get('sort', 'popularity')
    )
    pagination = query.paginate(page=page, per_page=per_page, error_out=False)

    return jsonify({
        'success': True,
        'templates': [template_summary(t) for t in pagination.items],
        'page': pagination.page,
        'pages': pagination.pages,
        'total': pagination.total,
    })


@templates_bp.route('/templates/<int:template_id>')
def get_template(template_id):
    definition = TemplateRepository.get_definition(template_id)
    return jsonify({'success': True, 'template': definition.to_dict()})
