from flask import Blueprint, jsonify, request
from flask_jwt_extended import create_access_token, set_access_cookies, unset_jwt_cookies
from marshmallow import ValidationError

from routes.decorators import identity_service, session_user
from schemas import error_list, login_schema, register_schema

auth_bp = Blueprint("auth", __name__)


def _signed_in_response(user, message, status=200):
    token = create_access_token(identity=str(user.id))
    response = jsonify(
        {'success': True, 'message': message, 'token': token, 'user': user.to_session_dict()}
    )
    response.status_code = status
    set_access_cookies(response, token)
    return response


@auth_bp.route("/register", methods=["POST"])
def register():
    try:
        payload = register_schema.load(request.get_json() or {})
    except ValidationError as exc:
        return jsonify({'success': False, 'message': 'Invalid input', 'errors': error_list(exc)}), 400

    user = identity_service().register(payload["username"], payload["password"], payload["email"])
    return _signed_in_response(user, 'User registered successfully', 201)


@auth_bp.route("/login", methods=["POST"])
def login():
    try:
        payload = login_schema.load(request.get_json() or {})
    except ValidationError as exc:
        return jsonify({'success': False, 'message': 'Invalid input', 'errors': error_list(exc)}), 400

    user = identity_service().login(payload["username"], payload["password"])
    return _signed_in_response(user, 'Successful login')


@auth_bp.route("/logout", methods=["POST"])
def logout():
    identity_service().logout()
    response = jsonify({'success': True, 'message': 'Logged out'})
    unset_jwt_cookies(response)
    return response


@auth_bp.route("/api/me", methods=["GET"])
def current_user():
    user = session_user()
    return jsonify(
        {
            "authenticated": user is not None,
            "is_admin": bool(user) and user["role"] == "admin",
            "user": user,
        }
    )
