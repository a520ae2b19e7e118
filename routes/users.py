# routes/users.py
from flask import Blueprint, current_app, g, jsonify

from errors import NotFound
from extensions import db
from models.user import User
from security.middleware import admin_required, get_sessions

users_bp = Blueprint('users', __name__, url_prefix='/api/users')


@users_bp.route("", methods=["GET"])
@admin_required
def list_users():
    users = User.query.order_by(User.username.asc()).all()
    return jsonify([u.to_public() for u in users])


@users_bp.route("/<int:user_id>", methods=["DELETE"])
@admin_required
def delete_user(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")

    db.session.delete(user)
    db.session.commit()
    revoked = get_sessions().revoke_user(user_id)
    current_app.logger.info(
        "User %s deleted by %s (%d session(s) revoked)", user_id, g.principal.username, revoked
    )
    return jsonify({"success": True})
