from collections.abc import Generator
from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError
from sqlmodel import Session

from app.core.db import engine
from app.core.security import decode_access_token
from app.exceptions.auth_exceptions import InvalidCredentialsError
from app.models.auth_schemas import TokenPayload

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_db)]
TokenDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def get_acting_account_id(credentials: TokenDep) -> UUID:
    """
    Resolve the authenticated account from the bearer token.

    Accounts are opaque to this service: the token's subject is trusted as
    the acting account id once the signature checks out.
    """
    if credentials is None:
        raise InvalidCredentialsError()
    try:
        payload = decode_access_token(credentials.credentials)
        token_data = TokenPayload(**payload)
        if token_data.sub is None:
            raise InvalidCredentialsError()
        return UUID(token_data.sub)
    except (jwt.InvalidTokenError, ValidationError, ValueError) as e:
        raise InvalidCredentialsError() from e


ActingAccount = Annotated[UUID, Depends(get_acting_account_id)]
