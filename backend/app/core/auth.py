"""Caller identity resolved from identity-provider bearer tokens.

The resolved ``Caller`` is passed explicitly into every service call;
services decide whether an anonymous caller is acceptable.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from app.core.config import settings

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Caller:
    """Verified identity of the user making a request."""
    user_id: str
    email: str = ""
    name: Optional[str] = None


def _display_name(claims: Dict[str, Any]) -> Optional[str]:
    if claims.get("name"):
        return str(claims["name"]).strip() or None
    first = claims.get("given_name")
    if not first:
        return None
    return f"{first} {claims.get('family_name') or ''}".strip()


def caller_from_claims(claims: Dict[str, Any]) -> Optional[Caller]:
    user_id = claims.get("sub")
    if not user_id:
        return None
    return Caller(
        user_id=str(user_id),
        email=str(claims.get("email") or ""),
        name=_display_name(claims),
    )


def decode_token(token: str) -> Optional[Caller]:
    """Verify a bearer token and return the caller it identifies, or None."""
    options = {"verify_aud": settings.AUTH_JWT_AUDIENCE is not None}
    try:
        claims = jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=settings.AUTH_JWT_ALGORITHMS,
            audience=settings.AUTH_JWT_AUDIENCE,
            issuer=settings.AUTH_JWT_ISSUER,
            options=options,
        )
    except JWTError as exc:
        logger.info("Rejected bearer token", extra={"error": str(exc)})
        return None
    return caller_from_claims(claims)


def get_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Caller]:
    """Dependency resolving the request's caller; None for anonymous requests."""
    if credentials is None:
        return None
    return decode_token(credentials.credentials)
