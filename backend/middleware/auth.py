"""
Authentication Middleware
Centralized auth dependency for FastAPI routes
"""
from datetime import timedelta
from typing import Optional

import jwt
from bson import ObjectId
from fastapi import Cookie, Header

from config import get_jwt_secret
from utils.errors import AuthError
from utils.mongo_helpers import parse_object_id
from utils.timezone import now_utc

TOKEN_ALGORITHM = "HS256"
TOKEN_LIFETIME = timedelta(days=7)


def create_access_token(
    user_id,
    email: Optional[str] = None,
    username: Optional[str] = None,
    expires_in: timedelta = TOKEN_LIFETIME,
) -> str:
    """Sign a session token carrying the user id."""
    payload = {
        "userId": str(user_id),
        "email": email,
        "username": username,
        "exp": now_utc() + expires_in,
    }
    return jwt.encode(payload, get_jwt_secret(), algorithm=TOKEN_ALGORITHM)


def extract_token(auth_token: Optional[str], authorization: Optional[str]) -> Optional[str]:
    """Cookie first, then 'Authorization: Bearer <token>'."""
    if auth_token:
        return auth_token
    if authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]
    return None


def verify_token(token: str) -> ObjectId:
    """
    Decode a session token and return the user id it carries.

    Raises:
        AuthError: token is expired, tampered with, or carries no valid user id
    """
    secret = get_jwt_secret()
    if not secret:
        raise AuthError("Invalid token")

    try:
        payload = jwt.decode(token, secret, algorithms=[TOKEN_ALGORITHM])
    except jwt.InvalidTokenError:
        raise AuthError("Invalid token")

    user_id = parse_object_id(payload.get("userId"))
    if user_id is None:
        raise AuthError("Invalid token")
    return user_id


def get_current_user_id(
    auth_token: Optional[str] = Cookie(None),
    authorization: Optional[str] = Header(None),
) -> ObjectId:
    """
    Resolve the authenticated user id for a request.

    Raises:
        AuthError: 401 if no token was sent or it fails verification
    """
    token = extract_token(auth_token, authorization)
    if not token:
        raise AuthError("Not authenticated")
    return verify_token(token)


def get_optional_user_id(
    auth_token: Optional[str] = Cookie(None),
    authorization: Optional[str] = Header(None),
) -> Optional[ObjectId]:
    """Same as get_current_user_id but returns None instead of raising."""
    token = extract_token(auth_token, authorization)
    if not token:
        return None
    try:
        return verify_token(token)
    except AuthError:
        return None
