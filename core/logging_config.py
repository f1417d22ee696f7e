import contextvars
import logging
import sys
import uuid
from typing import Optional

from flask import g, request

# 요청 추적용 request id
request_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("request_id", default=None)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [%(request_id)s] %(message)s"


class RequestIdFilter(logging.Filter):
    """Add the current request id to every log record"""

    def filter(self, record):
        record.request_id = request_id_var.get() or "-"
        return True


def configure_logging(app) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    # create_app 여러 번 호출(테스트)되어도 핸들러 중복 방지
    for h in list(root.handlers):
        if getattr(h, "_textstyler", False):
            root.removeHandler(h)
    handler._textstyler = True
    root.addHandler(handler)
    root.setLevel(level)
    app.logger.setLevel(level)

    @app.before_request
    def _bind_request_id():
        rid = (request.headers.get("X-Request-ID") or "").strip()[:64] or uuid.uuid4().hex
        g.request_id = rid
        g._request_id_token = request_id_var.set(rid)

    @app.after_request
    def _echo_request_id(resp):
        rid = getattr(g, "request_id", None)
        if rid:
            resp.headers["X-Request-ID"] = rid
        return resp

    @app.teardown_request
    def _unbind_request_id(exc=None):
        token = g.pop("_request_id_token", None)
        if token is not None:
            request_id_var.reset(token)
