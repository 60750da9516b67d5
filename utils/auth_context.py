from functools import wraps
from flask import g, jsonify
from security.session import resolve_principal


def load_principal():
    g.principal = resolve_principal()


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "principal", None) is None:
            return jsonify(error="Authentication required"), 401
        return fn(*args, **kwargs)
    return wrapper
