"""Authentication routes for user login, registration, and logout."""

from datetime import datetime
import logging
from flask import Blueprint, jsonify, request
from flask_login import LoginManager, login_user, logout_user, login_required, current_user
from models import db, User

auth_bp = Blueprint('auth', __name__)
login_manager = LoginManager()

logger = logging.getLogger(__name__)


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    """API callers get JSON instead of a login redirect."""
    return jsonify({'error': 'Authentication required.'}), 401


def _request_data():
    """Read the submitted fields from a JSON body or a form post."""
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form


@auth_bp.route('/login', methods=['POST'])
def login():
    """Handle user login."""
    data = _request_data()
    login_id = (data.get('email') or '').strip()  # Can be email or username
    password = data.get('password') or ''
    remember = bool(data.get('remember', False))

    # Find user by email first, then by username (case-insensitive)
    user = User.query.filter_by(email=login_id.lower()).first()
    if not user:
        user = User.query.filter(User.username.ilike(login_id)).first()

    if not user or not user.check_password(password):
        logger.info("Failed login attempt for %r", login_id)
        return jsonify({'success': False, 'error': 'Invalid username/email or password.'}), 401

    if not user.is_active:
        return jsonify({'success': False, 'error': 'Account is deactivated.'}), 403

    login_user(user, remember=remember)
    user.last_login = datetime.utcnow()
    db.session.commit()

    return jsonify({
        'success': True,
        'user': user.to_dict()
    })


@auth_bp.route('/register', methods=['POST'])
def register():
    """Handle user registration."""
    data = _request_data()
    email = (data.get('email') or '').lower().strip()
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''
    confirm_password = data.get('confirm_password') or ''
    first_name = (data.get('first_name') or '').strip()
    last_name = (data.get('last_name') or '').strip()

    errors = []

    # Validation
    if not email:
        errors.append('Email is required.')
    elif '@' not in email or '.' not in email:
        errors.append('Please enter a valid email address.')

    if not username:
        errors.append('Username is required.')
    elif len(username) < 3:
        errors.append('Username must be at least 3 characters.')
    elif not username.replace('_', '').isalnum():
        errors.append('Username can only contain letters, numbers, and underscores.')

    if not password:
        errors.append('Password is required.')
    elif len(password) < 8:
        errors.append('Password must be at least 8 characters.')

    if password != confirm_password:
        errors.append('Passwords do not match.')

    if email and User.query.filter_by(email=email).first():
        errors.append('An account with this email already exists.')

    if username and User.query.filter_by(username=username).first():
        errors.append('This username is already taken.')

    if errors:
        return jsonify({'success': False, 'error': errors[0], 'errors': errors}), 400

    user = User(
        email=email,
        username=username,
        first_name=first_name or None,
        last_name=last_name or None
    )
    user.set_password(password)
    db.session.add(user)
    db.session.commit()

    # Log the user in immediately
    login_user(user)
    user.last_login = datetime.utcnow()
    db.session.commit()

    return jsonify({
        'success': True,
        'user': user.to_dict(),
        'message': 'Account created successfully!'
    }), 201


@auth_bp.route('/logout')
@login_required
def logout():
    """Log out the current user."""
    logout_user()
    return jsonify({'success': True, 'message': 'You have been logged out.'})


@auth_bp.route('/api/user')
@login_required
def get_current_user():
    """Get the current logged-in user's information."""
    return jsonify({
        'success': True,
        'user': current_user.to_dict()
    })
