# marksheet/core/security.py
from datetime import timedelta
from typing import Dict, List, Optional

import bcrypt
import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pymongo.database import Database

from marksheet.core.config import CONFIG
from marksheet.core.database import USERS, get_database
from marksheet.core.logger import get_logger
from marksheet.utils.helpers import try_object_id, utcnow

logger = get_logger("security")

ACCESS_TOKEN_EXPIRE_MINUTES = CONFIG.ACCESS_TOKEN_EXPIRE_MINUTES
BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")

bearer_scheme = HTTPBearer(auto_error=False)


def _password_bytes(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes
    return password.encode("utf-8")[:72]


def get_password_hash(password: str) -> str:
    salt = bcrypt.gensalt(rounds=CONFIG.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def is_password_hash(stored: str | None) -> bool:
    return bool(stored) and stored.startswith(BCRYPT_PREFIXES)


def verify_password(plain_password: str, stored_password: str | None) -> bool:
    """
    Check a password against what is stored for the user.
    Accounts imported before hashing was introduced still hold plaintext;
    those are compared directly and migrated by the login route.
    """
    stored = stored_password or ""
    if is_password_hash(stored):
        try:
            return bcrypt.checkpw(_password_bytes(plain_password), stored.encode("utf-8"))
        except ValueError:
            logger.warning("Malformed password hash encountered")
            return False
    return bool(stored) and plain_password == stored


def create_access_token(data: Dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": utcnow() + expires_delta})
    return jwt.encode(to_encode, CONFIG.JWT_SECRET, algorithm=CONFIG.JWT_ALGORITHM)


def token_for_user(user: Dict) -> str:
    return create_access_token(
        data={"sub": str(user["_id"]), "email": user["email"], "role": user["role"]}
    )


def get_current_active_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Database = Depends(get_database),
) -> Dict:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    invalid = HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token")
    try:
        payload = jwt.decode(
            credentials.credentials,
            CONFIG.JWT_SECRET,
            algorithms=[CONFIG.JWT_ALGORITHM],
        )
    except jwt.PyJWTError:
        raise invalid

    user_oid = try_object_id(payload.get("sub"))
    if user_oid is None:
        raise invalid

    user = db[USERS].find_one({"_id": user_oid})
    if not user:
        raise invalid
    return user


def require_role(roles: List[str]):
    """Dependency factory: only lets through users whose role is listed."""

    def role_checker(current_user: Dict = Depends(get_current_active_user)) -> Dict:
        if current_user.get("role") not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
        return current_user

    return role_checker
