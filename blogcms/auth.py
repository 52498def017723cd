import os
from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Header, HTTPException
import logging

logger = logging.getLogger(__name__)

# Prefer JWT_SECRET but support legacy JWT_SECRET_KEY for compatibility
SECRET = os.getenv('JWT_SECRET') or os.getenv('JWT_SECRET_KEY', 'secret-key')
ALGORITHM = os.getenv('JWT_ALGORITHM', 'HS256')
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv('ACCESS_TOKEN_EXPIRE_MINUTES', '60'))

REQUIRED_CLAIMS = ('id', 'username')


def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({'exp': expire})
    encoded = jwt.encode(to_encode, SECRET, algorithm=ALGORITHM)
    return encoded


def decode_token(token: str):
    try:
        payload = jwt.decode(token, SECRET, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if any(claim not in payload for claim in REQUIRED_CLAIMS):
        return None
    return payload


async def get_current_user(authorization: Optional[str] = Header(None)) -> dict:
    """Gate for protected routes.

    The raw ``authorization`` header value is the token. A missing token is
    rejected with 401, a token that fails signature, expiry or claim checks
    with 403. On success the decoded identity is handed to the route.
    """
    if not authorization:
        raise HTTPException(status_code=401, detail='Missing token')
    payload = decode_token(authorization)
    if payload is None:
        logger.info({'msg': 'token_rejected'})
        raise HTTPException(status_code=403, detail='Invalid token')
    return {'id': payload['id'], 'username': payload['username']}
