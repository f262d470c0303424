"""Bearer-token authentication: JWS extraction and permission-claim checks."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Protocol

BEARER_SCHEME_NAME = "BearerAuth"
BEARER_PREFIX = "Bearer "
PERMISSIONS_CLAIM = "perms"
JWT_CLAIMS_CONTEXT_KEY = "jwt_claims"


class AuthError(Exception):
    """Raised when a request cannot be authenticated."""


class NoAuthHeaderError(AuthError):
    """The Authorization header is absent."""

    def __init__(self, message: str = "Authorization header is missing") -> None:
        super().__init__(message)


class InvalidAuthHeaderError(AuthError):
    """The Authorization header is not of the form ``Bearer <token>``."""

    def __init__(self, message: str = "Authorization header is malformed") -> None:
        super().__init__(message)


class ClaimsInvalidError(AuthError):
    """The token lacks a permission that the operation requires."""

    def __init__(
        self, message: str = "Provided claims do not match expected scopes"
    ) -> None:
        super().__init__(message)


class JWSValidator(Protocol):
    """Checks a JWS and returns the claims of the token it carries."""

    def validate_jws(self, jws: str) -> Mapping[str, Any]: ...


def get_jws_from_header(authorization: str | None) -> str:
    """Return the JWS from an ``Authorization: Bearer <jws>`` header value."""
    if not authorization:
        raise NoAuthHeaderError()
    if not authorization.startswith(BEARER_PREFIX):
        raise InvalidAuthHeaderError()
    return authorization[len(BEARER_PREFIX):]


def get_claims_from_token(token: Mapping[str, Any]) -> list[str]:
    """Return the permission claims stored in the token.

    A token without the claim has no permissions and yields an empty list.
    """
    if PERMISSIONS_CLAIM not in token:
        return []
    raw = token[PERMISSIONS_CLAIM]
    if not isinstance(raw, list):
        raise AuthError(f"'{PERMISSIONS_CLAIM}' claim is unexpected type'")
    claims: list[str] = []
    for index, item in enumerate(raw):
        if not isinstance(item, str):
            raise AuthError(f"{PERMISSIONS_CLAIM}[{index}] is not a string")
        claims.append(item)
    return claims


def check_token_claims(
    expected_claims: Iterable[str], token: Mapping[str, Any]
) -> None:
    """Raise ClaimsInvalidError unless every expected claim is in the token."""
    try:
        claims = set(get_claims_from_token(token))
    except AuthError as exc:
        raise AuthError(f"getting claims from token: {exc}") from exc
    if any(expected not in claims for expected in expected_claims):
        raise ClaimsInvalidError()


def authenticate(
    validator: JWSValidator,
    security_scheme_name: str,
    authorization: str | None,
    scopes: Iterable[str],
) -> Mapping[str, Any]:
    """Validate the bearer token and check it grants all scopes.

    Returns the validated token's claims so the caller can hand them on
    to the request handler.
    """
    if security_scheme_name != BEARER_SCHEME_NAME:
        raise AuthError(
            f"security scheme {security_scheme_name} != '{BEARER_SCHEME_NAME}'"
        )
    try:
        jws = get_jws_from_header(authorization)
    except AuthError as exc:
        raise AuthError(f"getting jws: {exc}") from exc
    try:
        token = validator.validate_jws(jws)
    except Exception as exc:
        raise AuthError(f"validating JWS: {exc}") from exc
    try:
        check_token_claims(scopes, token)
    except AuthError as exc:
        raise AuthError(f"token claims don't match: {exc}") from exc
    return token