from datetime import datetime, timedelta, timezone

from jose import jwt

from checkin.config import ALGORITHM, SECRET_KEY


def create_access_token(user_id: str, role: str, expires_delta: timedelta = timedelta(minutes=20)):
    """Mint a bearer token the way the identity provider does (dev and tests only)."""
    data_to_encode = {
        "sub": user_id,
        "role": role,
    }
    expires = datetime.now(timezone.utc) + expires_delta
    data_to_encode.update({"exp": expires})
    return jwt.encode(data_to_encode, SECRET_KEY, algorithm=ALGORITHM)
