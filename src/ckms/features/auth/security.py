import logging
from datetime import datetime, timedelta, timezone
from typing import Annotated, Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError

from ...core.config import SECRET_KEY, ALGORITHM, JWT_AUDIENCE, ACCESS_TOKEN_EXPIRE_MINUTES
from .schemas import AuthUser, TokenPayload

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

REPORT_ROLES = ("admin", "manager")


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    to_encode.setdefault("aud", JWT_AUDIENCE)
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_user_token(
    sub: str, chain_id: int, role: str, email: Optional[str] = None,
    store_id: Optional[int] = None, expires_delta: Optional[timedelta] = None,
) -> str:
    claims = {
        "sub": sub,
        "email": email,
        "app_metadata": {"chain_id": chain_id, "role": role, "store_id": store_id},
    }
    return create_access_token(claims, expires_delta=expires_delta)


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> AuthUser:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception
    try:
        payload = TokenPayload.model_validate(
            jwt.decode(credentials.credentials, SECRET_KEY, algorithms=[ALGORITHM], audience=JWT_AUDIENCE)
        )
    except JWTError as e:
        logger.error(f"JWT decoding error: {e}")
        raise credentials_exception
    except ValidationError as e:
        logger.error(f"Token data validation error: {e}")
        raise credentials_exception

    if payload.sub is None:
        logger.warning("Token sub is missing.")
        raise credentials_exception
    if not payload.app_metadata.role:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing role in token")
    if not payload.app_metadata.chain_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing chain_id in token")

    try:
        return AuthUser(
            id=payload.sub,
            email=payload.email,
            chain_id=payload.app_metadata.chain_id,
            role=payload.app_metadata.role,
            store_id=payload.app_metadata.store_id,
        )
    except ValidationError as e:
        logger.error(f"Token claims rejected: {e}")
        raise credentials_exception


def require_roles(*roles: str) -> Callable:
    async def _check_role(current_user: Annotated[AuthUser, Depends(get_current_user)]) -> AuthUser:
        if current_user.role not in roles:
            logger.warning(f"User {current_user.id} with role {current_user.role} denied; needs one of {roles}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="The user doesn't have enough privileges",
            )
        return current_user

    return _check_role
