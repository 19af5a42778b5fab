"""Registration and sign-in routes."""

from flask import Blueprint, jsonify

from services.errors import AuthenticationError
from services.session import current_user, sign_in, sign_out
from services.user_service import create_user, get_all_teachers
from utils.helpers import json_body

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


@auth_bp.route('/register', methods=['POST'])
def register():
    """Register a teacher, or a student under an existing teacher."""
    data = json_body()
    user = create_user(
        name=data.get('name', ''),
        email=data.get('email', ''),
        role=data.get('role', ''),
        password=data.get('password'),
        teacher_id=data.get('teacher_id'),
    )
    return jsonify({"success": True, "user": user.public_dict()}), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = json_body()
    user = sign_in(data.get('email', ''), data.get('password'), data.get('role') or None)
    return jsonify({"success": True, "user": user.public_dict()})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    sign_out()
    return jsonify({"success": True})


@auth_bp.route('/me', methods=['GET'])
def me():
    user = current_user()
    if user is None:
        raise AuthenticationError("Not signed in")
    return jsonify({"user": user.public_dict()})


@auth_bp.route('/teachers', methods=['GET'])
def list_teachers():
    """Teachers a new student can register under."""
    teachers = [{"id": t.id, "name": t.name} for t in get_all_teachers()]
    return jsonify({"teachers": teachers})
