import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from ecofinds import config
from ecofinds.errors import AuthenticationError
from ecofinds.schemas import Identity

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt", "argon2"], deprecated="auto")

# auto_error is off so a missing header is reported as 401 in our own error shape
security = HTTPBearer(auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # unrecognized or malformed hash
        return False


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(identity: Identity, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token carrying the user id (``sub``) and email."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": identity.user_id, "email": identity.email, "exp": expire}
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def decode_access_token(token: str) -> Identity:
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except JWTError as exc:
        logger.debug("Token rejected: %s", exc)
        raise AuthenticationError("Invalid token")

    user_id = payload.get("sub")
    email = payload.get("email")
    if not user_id or email is None:
        raise AuthenticationError("Invalid token")
    return Identity(user_id=user_id, email=email)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("No token provided")
    return decode_access_token(credentials.credentials)
