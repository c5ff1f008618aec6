from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from starlette import status

from checkin.config import IDENTITY_TOKEN_URL
from checkin.schemas.accessToken import TokenData
from checkin.utils.decodeAccessToken import decode_token

# Accounts and logins live with the external identity provider.
oauth2_bearer = OAuth2PasswordBearer(tokenUrl=IDENTITY_TOKEN_URL, auto_error=False)


def get_current_user(token: str | None = Depends(oauth2_bearer)) -> TokenData:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return TokenData(**decode_token(token))


def get_current_host_user(current_user: TokenData = Depends(get_current_user)) -> TokenData:
    if current_user.role != "host":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions"
        )
    return current_user
