from __future__ import annotations
from functools import wraps
from flask import request, current_app


def login_required():
    """
    Run the session guard before the view and pass the resolved caller as
    the `identity` keyword argument. Failures raise Unauthorized, which the
    error handlers turn into a 401 envelope.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            guard = current_app.extensions["session_guard"]
            kwargs["identity"] = guard.authenticate(request)
            return fn(*args, **kwargs)

        return wrapper

    return decorator
