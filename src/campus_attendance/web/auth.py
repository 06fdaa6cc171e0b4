from __future__ import annotations

from functools import wraps

from flask import g, request

from ..auth.identity import Principal, TokenVerifier
from ..auth.policy import Capability, require_capability


def bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip()
    return ""


def make_auth_decorators(verifier: TokenVerifier):
    """Build the `login_required` / `capability_required` decorators bound to a verifier."""

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.principal = verifier.verify(bearer_token())
            return view(*args, **kwargs)

        return wrapper

    def capability_required(capability: Capability):
        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                principal = verifier.verify(bearer_token())
                require_capability(principal.role, capability)
                g.principal = principal
                return view(*args, **kwargs)

            return wrapper

        return decorator

    return login_required, capability_required


def current_principal() -> Principal:
    return g.principal
