from __future__ import annotations

import logging
from typing import Optional, Tuple

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import RequestEntityTooLarge

from ..core.constants import ERROR_CODE_VERSION
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, DomainError, ValidationError

logger = logging.getLogger(__name__)


def current_identity() -> Tuple[str, Role]:
    """Agent identity placed in the session by the external auth layer."""
    user_id = session.get("user_id")
    if not user_id:
        raise AuthenticationError("Please sign in to continue")
    try:
        role = Role(session.get("role", Role.DELIVERY.value))
    except ValueError:
        raise AuthenticationError("Session role is not recognised, please sign in again") from None
    return str(user_id), role


def client_ip() -> Optional[str]:
    """Peer address; ProxyFix rewrites it from X-Forwarded-For only for configured proxies."""
    return request.remote_addr


def error_payload(exc: DomainError) -> dict:
    return {
        "message": exc.message,
        "errorCode": exc.error_code.value,
        "errorCodeVersion": ERROR_CODE_VERSION,
    }


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        if exc.http_status >= 500:
            logger.warning("%s %s failed: %s", request.method, request.path, exc.message)
        return jsonify(error_payload(exc)), exc.http_status

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(_exc):
        return jsonify(error_payload(ValidationError("Upload is too large"))), 413
