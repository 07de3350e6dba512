"""Role-based access control decorators."""
from functools import wraps
from flask import abort
from flask_login import current_user


def role_required(*roles):
    """Require user to have one of the given roles."""
    def decorator(f):
        @wraps(f)
        def wrapped(*args, **kwargs):
            if not current_user.is_authenticated:
                abort(401)
            if current_user.role not in roles:
                abort(403)
            return f(*args, **kwargs)
        return wrapped
    return decorator


def admin_required(f):
    return role_required('admin')(f)


def manager_required(f):
    return role_required('admin', 'manager')(f)


def quotations_required(f):
    @wraps(f)
    def wrapped(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)
        if not current_user.can_manage_quotations():
            abort(403)
        return f(*args, **kwargs)
    return wrapped


def costs_required(f):
    @wraps(f)
    def wrapped(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)
        if not current_user.can_manage_costs():
            abort(403)
        return f(*args, **kwargs)
    return wrapped


def liquidations_required(f):
    @wraps(f)
    def wrapped(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)
        if not current_user.can_manage_liquidations():
            abort(403)
        return f(*args, **kwargs)
    return wrapped
