from datetime import datetime, timedelta, timezone
from typing import Optional
from passlib.context import CryptContext
from jose import jwt
from sqlalchemy.orm import Session
from .. import config
from ..db import models

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def hash_password(raw: str) -> str:
    return pwd_context.hash(raw)

def verify_password(raw: str, hashed: str) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(raw, hashed)

def create_access_token(sub: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {"sub": sub, "exp": expire}
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)

def decode_subject(token: str) -> Optional[str]:
    """Return the token subject; raises jose.JWTError on a bad token."""
    payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    return payload.get("sub")

class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def authenticate_user(self, email: str, password: str) -> Optional[models.User]:
        user = self.db.query(models.User).filter(models.User.email == email).first()
        if not user:
            return None
        if not verify_password(password, user.hashed_password or ""):
            return None
        return user

    def register_if_absent(self, email: str, password: Optional[str] = None) -> models.User:
        user = self.db.query(models.User).filter(models.User.email == email).first()
        if user:
            return user
        user = models.User(email=email, hashed_password=hash_password(password or "demo-pass"))
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user
