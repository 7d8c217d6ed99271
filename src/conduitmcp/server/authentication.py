# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

"""Caller authentication for HTTP transports.

Key pieces:

* :class:`AuthConfig`: opt-in server configuration selecting one strategy.
* :func:`resolve`: turns request headers into :class:`AuthSuccess` or
  :class:`AuthFailure` without touching the network.
* :class:`AuthenticationMiddleware`: Starlette middleware that runs
  :func:`resolve` before the MCP endpoint and answers ``401`` on failure.

Strategies:

``bearer_token``
    ``Authorization: Bearer <token>`` must equal :attr:`AuthConfig.token`.
``api_key``
    The :attr:`AuthConfig.header` header must equal :attr:`AuthConfig.api_key`.
``function``
    The bearer credential is passed to :attr:`AuthConfig.verify` together with
    :attr:`AuthConfig.verify_args`.  The callable may be async and must return
    :class:`AuthSuccess`/:class:`AuthFailure` or an ``("ok", principal)`` /
    ``("error", reason)`` pair.  Raising :class:`AuthenticationError` rejects
    the caller.  Anything else is treated as a server misconfiguration.
``none``
    Authentication disabled.

The resolved principal is opaque to ConduitMCP; it is handed to every handler
as its first argument.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
import hmac
from typing import Any, Final, Literal

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from ..utils import component_logger, maybe_await_with_args


FailureKind = Literal["missing", "rejected", "configuration"]

MISSING_AUTHORIZATION: Final[str] = "Missing or invalid Authorization header"
AUTHENTICATION_FAILED: Final[str] = "Authentication failed"
CONFIGURATION_ERROR: Final[str] = "Server configuration error"

_STRATEGY_ALIASES: Final[Mapping[str, str]] = {
    "bearer_token": "bearer_token",
    "bearertoken": "bearer_token",
    "bearer": "bearer_token",
    "api_key": "api_key",
    "apikey": "api_key",
    "function": "function",
    "custom": "custom",
    "none": "none",
    "disabled": "none",
}

_logger = component_logger("authentication")


class AuthenticationError(Exception):
    """Raised by a ``verify`` callable to reject the presented credential."""


@dataclass(frozen=True, slots=True)
class Principal:
    """Identity produced by the built-in strategies."""

    subject: str | None = None
    claims: Mapping[str, Any] = field(default_factory=dict)

    @property
    def identity(self) -> str | None:
        """Return the subject, falling back to a ``sub`` claim."""
        if self.subject is not None:
            return self.subject
        sub = self.claims.get("sub")
        return str(sub) if sub is not None else None


@dataclass(frozen=True, slots=True)
class AuthSuccess:
    principal: Any = None


@dataclass(frozen=True, slots=True)
class AuthFailure:
    """A rejected request.

    ``kind`` separates a missing credential, a credential the server refused,
    and a server-side misconfiguration.  Only the first is described to the
    caller; the other two share a generic message.
    """

    reason: str
    kind: FailureKind = "rejected"

    @property
    def public_message(self) -> str:
        if self.kind == "missing":
            return self.reason
        return AUTHENTICATION_FAILED


AuthResult = AuthSuccess | AuthFailure
VerifyFn = Callable[..., Any]


@dataclass(slots=True)
class AuthConfig:
    """Server-side authentication configuration."""

    enabled: bool = True
    strategy: str = "bearer_token"
    token: str | None = None
    api_key: str | None = None
    header: str = "x-api-key"
    verify: VerifyFn | None = None
    verify_args: Sequence[Any] = ()
    assign_key: str = "current_user"

    @property
    def normalized_strategy(self) -> str | None:
        """Canonical strategy name, or ``None`` when unrecognized.

        camelCase spellings such as ``bearerToken`` and ``apiKey`` are accepted.
        """
        key = str(self.strategy).replace("-", "_").lower()
        return _STRATEGY_ALIASES.get(key) or _STRATEGY_ALIASES.get(key.replace("_", ""))

    @property
    def active(self) -> bool:
        return self.enabled and self.normalized_strategy != "none"


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


async def resolve(config: AuthConfig, headers: Mapping[str, str], *, method: str = "POST") -> AuthResult:
    """Authenticate a request from its headers.

    Args:
        config: Strategy configuration.
        headers: Request headers; lookups are case-insensitive.
        method: HTTP method.  ``OPTIONS`` pre-flight requests always pass.

    Returns:
        :class:`AuthSuccess` with the principal (``None`` when disabled) or
        :class:`AuthFailure`.
    """
    if not config.active or method.upper() == "OPTIONS":
        return AuthSuccess(None)

    strategy = config.normalized_strategy
    if strategy == "custom":
        _logger.warning(
            "auth strategy 'custom' is deprecated, use 'function' instead",
            extra={"event": "auth.deprecated_strategy"},
        )
        strategy = "function"

    if strategy in ("bearer_token", "function"):
        credential = _bearer_credential(headers)
        if credential is None:
            return AuthFailure(MISSING_AUTHORIZATION, kind="missing")
    elif strategy == "api_key":
        credential = _header(headers, config.header)
        if credential is None:
            return AuthFailure(f"Missing {config.header} header", kind="missing")
    else:
        _logger.error(
            "invalid auth strategy %r",
            config.strategy,
            extra={"event": "auth.invalid_strategy"},
        )
        return AuthFailure(CONFIGURATION_ERROR, kind="configuration")

    result = await _verify(config, strategy, credential)
    if isinstance(result, AuthFailure):
        if result.kind == "configuration":
            _logger.error(
                "authentication misconfigured",
                extra={"event": "auth.configuration_error", "strategy": strategy, "reason": result.reason},
            )
        else:
            _logger.warning(
                "authentication failed",
                extra={"event": "auth.reject", "strategy": strategy, "reason": result.reason},
            )
    return result


async def _verify(config: AuthConfig, strategy: str, credential: str) -> AuthResult:
    secret = config.token if strategy == "bearer_token" else config.api_key if strategy == "api_key" else None
    if secret is not None:
        if hmac.compare_digest(credential.encode(), secret.encode()):
            return AuthSuccess(Principal(claims={"authenticated": True, "strategy": strategy}))
        return AuthFailure("Invalid token" if strategy == "bearer_token" else "Invalid API key")

    if config.verify is None:
        _logger.error(
            "no verification method configured",
            extra={"event": "auth.verify_missing", "strategy": strategy},
        )
        return AuthFailure(CONFIGURATION_ERROR, kind="configuration")

    try:
        outcome = await maybe_await_with_args(config.verify, credential, *config.verify_args)
    except AuthenticationError as exc:
        return AuthFailure(str(exc) or AUTHENTICATION_FAILED)
    except Exception as exc:
        _logger.exception(
            "verify callable raised",
            extra={"event": "auth.verify_error", "strategy": strategy, "error": type(exc).__name__},
        )
        return AuthFailure(CONFIGURATION_ERROR, kind="configuration")
    return _interpret(strategy, outcome)


def _interpret(strategy: str, outcome: Any) -> AuthResult:
    if isinstance(outcome, (AuthSuccess, AuthFailure)):
        return outcome
    if isinstance(outcome, tuple) and len(outcome) == 2:
        tag, payload = outcome
        if tag == "ok":
            return AuthSuccess(payload)
        if tag == "error":
            return AuthFailure(str(payload))
    _logger.error(
        "verify returned an unexpected value",
        extra={"event": "auth.verify_unexpected", "strategy": strategy, "outcome": repr(outcome)},
    )
    return AuthFailure(CONFIGURATION_ERROR, kind="configuration")


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is None:
        lowered = name.lower()
        value = next((item for key, item in headers.items() if key.lower() == lowered), None)
    return value or None


def _bearer_credential(headers: Mapping[str, str]) -> str | None:
    value = _header(headers, "authorization")
    if value is None:
        return None
    scheme, _, token = value.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token


# ---------------------------------------------------------------------------
# Starlette integration
# ---------------------------------------------------------------------------


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Reject unauthenticated requests before they reach the MCP endpoint.

    On success the principal is stored on ``request.state.<assign_key>``.
    """

    def __init__(self, app: ASGIApp, config: AuthConfig, *, exempt_paths: Sequence[str] = ()) -> None:
        super().__init__(app)
        self.config = config
        self.exempt_paths = frozenset(exempt_paths)

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        if request.url.path in self.exempt_paths:
            return await call_next(request)

        result = await resolve(self.config, request.headers, method=request.method)
        if isinstance(result, AuthFailure):
            return challenge_response(result)

        setattr(request.state, self.config.assign_key, result.principal)
        return await call_next(request)


def challenge_response(failure: AuthFailure) -> JSONResponse:
    headers = {"WWW-Authenticate": 'Bearer error="invalid_token"'}
    payload = {"error": "Unauthorized", "message": failure.public_message}
    return JSONResponse(payload, status_code=401, headers=headers)


__all__ = [
    "AUTHENTICATION_FAILED",
    "CONFIGURATION_ERROR",
    "MISSING_AUTHORIZATION",
    "AuthConfig",
    "AuthFailure",
    "AuthResult",
    "AuthSuccess",
    "AuthenticationError",
    "AuthenticationMiddleware",
    "Principal",
    "challenge_response",
    "resolve",
]
