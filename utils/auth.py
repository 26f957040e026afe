"""
JWT helpers for the staff session token.
Tokens are issued by the external session provider; this module only checks
the signature and expiry and extracts the staff email.
"""
from datetime import datetime, timedelta
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from config import ACCESS_TOKEN_EXPIRE_MINUTES, AUTH_JWT_ALGORITHM, AUTH_JWT_SECRET
from utils.errors import AuthError


def create_access_token(email: str, expires_delta: Optional[timedelta] = None, **claims) -> str:
    """
    Issues a signed access token for the given email (tooling and tests)
    """
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = dict(claims)
    to_encode.update({
        "sub": email,
        "email": email,
        "exp": expire,
        "iat": now,
        "type": "access",
    })
    return jwt.encode(to_encode, AUTH_JWT_SECRET, algorithm=AUTH_JWT_ALGORITHM)


def verify_token(token: str) -> str:
    """
    Verifies a bearer token and returns the staff email it carries

    Raises:
        AuthError: if the token is malformed, expired or has no email
    """
    try:
        payload = jwt.decode(token, AUTH_JWT_SECRET, algorithms=[AUTH_JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise AuthError("Token expired")
    except JWTError:
        raise AuthError("Could not validate credentials")

    email = payload.get("email") or payload.get("sub")
    if not email:
        raise AuthError("Could not validate credentials")
    return email.strip().lower()
