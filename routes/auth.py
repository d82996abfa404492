import logging

from flask import Blueprint, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from models import User, db
from forms import RegistrationForm, LoginForm

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


@auth_bp.route('/register', methods=['POST'])
def register():
    form = RegistrationForm()
    if not form.validate_on_submit():
        return jsonify({'success': False, 'error': 'Invalid registration data',
                        'fields': form.error_messages()}), 400

    email = form.email.data.strip().lower()
    if User.query.filter_by(email=email).first():
        return jsonify({'success': False, 'error': 'Email is already registered'}), 409

    try:
        user = User(email=email, name=(form.name.data or '').strip() or None)
        user.set_password(form.password.data)
        db.session.add(user)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    login_user(user)
    logger.info(f"Registered user {user.id}")
    return jsonify({'success': True, 'user': user.to_dict()}), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        return jsonify({'success': False, 'error': 'Invalid login data',
                        'fields': form.error_messages()}), 400

    user = User.query.filter_by(email=form.email.data.strip().lower()).first()
    if user is None or not user.check_password(form.password.data):
        return jsonify({'success': False, 'error': 'Invalid email or password'}), 401

    login_user(user)
    return jsonify({'success': True, 'user': user.to_dict()})


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'success': True})


@auth_bp.route('/me')
@login_required
def me():
    return jsonify({'success': True, 'user': current_user.to_dict()})
