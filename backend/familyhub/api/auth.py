from fastapi import APIRouter, Depends, HTTPException, status, Header
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from jose import JWTError
from ..db.session import get_db
from ..db import models
from ..services.auth_service import AuthService, create_access_token, decode_subject
from ..services.demo_user import get_or_create_demo_user
from ..errors import ForbiddenError
from ..services.family_groups import get_user_family_group, is_demo_user

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/token")
async def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    auth = AuthService(db)
    # Auto-register convenience for dev if user absent
    auth.register_if_absent(form_data.username, form_data.password)
    user = auth.authenticate_user(form_data.username, form_data.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid credentials")
    token = create_access_token(user.id)
    return {"access_token": token, "token_type": "bearer"}


def get_current_user_optional(db: Session = Depends(get_db), authorization: str | None = Header(None)) -> models.User | None:
    """Best-effort user retrieval; returns None if no valid bearer token."""
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    token = authorization.split(None, 1)[1]
    try:
        sub = decode_subject(token)
        if not sub:
            return None
        return db.query(models.User).filter(models.User.id == sub).first()
    except JWTError:
        return None


def get_viewer(db: Session = Depends(get_db), current_user: models.User | None = Depends(get_current_user_optional)) -> models.User:
    """Authenticated user, or the demo user when no token is presented."""
    return current_user or get_or_create_demo_user(db)


def get_real_viewer(viewer: models.User = Depends(get_viewer)) -> models.User:
    """Signed-in member of the real family; demo visitors are refused."""
    if is_demo_user(viewer.id):
        raise ForbiddenError("DEMO_USER_FORBIDDEN", "Demo users cannot run this action")
    return viewer


@router.get("/me")
def me(viewer: models.User = Depends(get_viewer)):
    return {"id": viewer.id, "email": viewer.email, "familyGroup": get_user_family_group(viewer.id)}
