from flask import abort, current_app, request

from auth.identity import load_current_account


def load_user():
    load_current_account()


def guard_payload_size():
    limit = current_app.config.get("MAX_PAYLOAD_BYTES") or 256 * 1024
    if request.content_length and request.content_length > limit:
        abort(413)


def register_hooks(app):
    app.before_request(guard_payload_size)
    app.before_request(load_user)
