from flask import Blueprint, request, jsonify, current_app, g

from models import db
from models.user import User, UserRole
from security.csrf import issue_csrf_token
from security.password import hash_password, verify_password, validate_password
from security.rbac import USER
from security.session import cookie_name, sign_in, sign_out
from utils.audit import log_event
from utils.auth_context import login_required

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _is_valid_email(email: str) -> bool:
    return isinstance(email, str) and "@" in email and len(email) <= 255


@auth_bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    full_name = data.get("full_name")

    if not _is_valid_email(email):
        return jsonify(error="Invalid email"), 400
    valid, errors = validate_password(password)
    if not valid:
        return jsonify(error="Password does not meet policy", details=errors), 400
    if full_name is not None and (not isinstance(full_name, str) or len(full_name.strip()) > 120):
        return jsonify(error="Invalid full_name"), 400

    if User.query.filter_by(email=email).first():
        log_event("REGISTER_FAIL_EMAIL_EXISTS", email=email)
        return jsonify(error="Email already registered"), 409

    user = User(
        email=email,
        password_hash=hash_password(password),
        full_name=full_name.strip() if full_name else None,
    )
    # every new account starts as a plain user; only an admin can change that
    user.role_binding = UserRole(role=USER)
    db.session.add(user)
    db.session.commit()

    log_event("REGISTER_SUCCESS", target=user)
    return jsonify(message="Registered successfully", id=user.id), 201


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    user = User.query.filter_by(email=email).first()
    if not user or not verify_password(password, user.password_hash):
        log_event("LOGIN_FAIL", target=user, email=email)
        return jsonify(error="Invalid credentials"), 401

    # any session the user already had is ended here
    raw_token, principal, rotated = sign_in(user)

    resp = jsonify(message="Login OK", role=user.role)
    resp.set_cookie(
        cookie_name(),
        raw_token,
        httponly=True,
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        max_age=current_app.config.get("SESSION_LIFETIME_SECONDS", 8 * 60 * 60),
        path="/",
    )
    resp = issue_csrf_token(resp)

    log_event("LOGIN_SUCCESS", principal, user, rotated_sessions=rotated)
    return resp, 200


@auth_bp.get("/me")
@login_required
def me():
    user = db.session.get(User, g.principal.user_id)
    return jsonify(
        id=g.principal.user_id,
        email=g.principal.email,
        full_name=user.full_name,
        role=g.principal.role,
    ), 200


@auth_bp.post("/logout")
@login_required
def logout():
    sign_out(g.principal)
    log_event("LOGOUT", g.principal)

    resp = jsonify(message="Logged out")
    resp.delete_cookie(cookie_name(), path="/")
    return resp, 200
