# controllers/auth.py
"""
Authentication routes for lecturer sign-up, login and logout.
"""

from flask import jsonify
from flask_login import login_required, current_user
from flask_wtf.csrf import generate_csrf

from .forms.auth_forms import LoginForm, LecturerRegistrationForm
from trackas.services.auth_service import AuthService

from . import auth_bp


def _form_errors(form):
    return jsonify({
        'success': False,
        'message': 'Invalid input',
        'error_code': 'validation_error',
        'errors': form.errors
    }), 400


@auth_bp.route('/csrf-token')
def csrf_token():
    """CSRF token for JSON clients."""
    return jsonify({'csrf_token': generate_csrf()})


@auth_bp.route('/register', methods=['POST'])
def register():
    """Lecturer sign-up."""
    form = LecturerRegistrationForm()
    if not form.validate_on_submit():
        return _form_errors(form)

    success, lecturer, message = AuthService.register_lecturer(
        email=form.email.data,
        full_name=form.full_name.data,
        password=form.password.data
    )

    if not success:
        return jsonify({'success': False, 'message': message, 'error_code': 'registration_failed'}), 409

    return jsonify({'success': True, 'message': message, 'lecturer': lecturer.to_dict()}), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    """Lecturer login."""
    form = LoginForm()
    if not form.validate_on_submit():
        return _form_errors(form)

    success, lecturer, message = AuthService.authenticate_lecturer(
        email=form.email.data,
        password=form.password.data,
        remember_me=form.remember_me.data
    )

    if not success:
        return jsonify({'success': False, 'message': message, 'error_code': 'invalid_credentials'}), 401

    return jsonify({'success': True, 'message': message, 'lecturer': lecturer.to_dict()})


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """Lecturer logout."""
    AuthService.logout_lecturer_session()
    return jsonify({'success': True, 'message': 'You have been logged out successfully.'})


@auth_bp.route('/me')
@login_required
def me():
    """Details of the logged-in lecturer."""
    return jsonify({'success': True, 'lecturer': current_user.to_dict()})
