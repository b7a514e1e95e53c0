from __future__ import annotations

from pathlib import Path

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .security import tokens_match

auth_scheme = HTTPBearer(auto_error=False)


def get_db_path(request: Request) -> Path:
    return request.app.state.db_path


async def verify_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(auth_scheme),
) -> None:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
        )
    expected = request.app.state.token
    if not expected or not tokens_match(credentials.credentials, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )
