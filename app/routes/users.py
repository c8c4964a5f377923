"""
User Routes - public profiles, following and role management.
"""

import logging

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user

from app.auth.decorators import admin_required
from app.exceptions import NotFoundError, ValidationError
from app.models import db, User
from app.utils import json_body

logger = logging.getLogger(__name__)

bp = Blueprint('users', __name__)

ROLES = ('user', 'admin')


def _get_user_or_404(user_id):
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError('User not found')
    return user


@bp.route('/users/<int:user_id>', methods=['GET'])
@login_required
def get_user(user_id):
    """Public profile with avatar URL."""
    user = _get_user_or_404(user_id)
    size = request.args.get('size', type=int)

    data = user.to_public_dict()
    data['gravatar'] = user.gravatar(size if size and size > 0 else None)
    data['followers_count'] = user.followers.count()
    data['followed'] = current_user.is_following(user)
    return jsonify({'data': data})


@bp.route('/users/follow/<int:user_id>', methods=['PUT'])
@login_required
def put_follow(user_id):
    """Follow or unfollow a user. Returns the new state."""
    user = _get_user_or_404(user_id)
    if user.id == current_user.id:
        raise ValidationError('You cannot follow yourself')

    me = current_user._get_current_object()
    if me.is_following(user):
        user.followers.remove(me)
        following = False
    else:
        user.followers.append(me)
        following = True
    db.session.commit()

    logger.info('User %s %s user %s', current_user.id,
                'followed' if following else 'unfollowed', user.id)
    return jsonify({'data': following})


@bp.route('/users/<int:user_id>/role', methods=['PATCH'])
@admin_required
def update_role(user_id):
    """Change a user's role (admin only)."""
    user = _get_user_or_404(user_id)
    data = json_body()
    role = str(data.get('role', '')).strip()

    if role not in ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(ROLES)}")
    if user.id == current_user.id and role != 'admin':
        raise ValidationError('You cannot remove your own admin role')

    user.role = role
    db.session.commit()

    logger.info('Admin %s set role of user %s to %s', current_user.id, user.id, role)
    return jsonify({'data': user.to_public_dict()})
