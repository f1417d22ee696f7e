from functools import wraps

from flask import jsonify, make_response

NO_STORE = "no-store, no-cache, must-revalidate, max-age=0"


def _no_store(resp):
    resp.headers["Cache-Control"] = NO_STORE
    resp.headers["Pragma"] = "no-cache"
    resp.headers["Expires"] = "0"
    return resp


def nocache(view):
    @wraps(view)
    def _wrapped(*args, **kwargs):
        return _no_store(make_response(view(*args, **kwargs)))

    return _wrapped


# api 공통 에러 응답
def _json_err(code, message=None, status=400, **extra):
    payload = {"error": code, "message": message, **extra}
    return _no_store(make_response(jsonify(payload), status))
