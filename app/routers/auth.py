import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Response, Request
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import id_token as google_id_token
from google.auth.transport import requests as google_requests
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import (
    REFRESH,
    InvalidToken,
    make_access_token,
    make_refresh_token,
    new_jti,
    read_token,
)
from app.db.session import get_db
from app.models.user import User
from app.schemas.auth import GoogleIn, UserOut

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger("app.auth")

ACCESS_COOKIE = "access_token"
REFRESH_COOKIE = "refresh_token"


def user_out(user: User) -> UserOut:
    return UserOut(
        id=str(user.id), email=user.email, name=user.name, timezone=user.timezone
    )


def _set_auth_cookies(resp: Response, access: str, refresh: str):
    common = dict(
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        path="/",
    )
    if settings.COOKIE_DOMAIN:
        common["domain"] = settings.COOKIE_DOMAIN

    resp.set_cookie(
        key=ACCESS_COOKIE,
        value=access,
        max_age=settings.ACCESS_TTL_MIN * 60,
        **common,
    )
    resp.set_cookie(
        key=REFRESH_COOKIE,
        value=refresh,
        max_age=settings.REFRESH_TTL_DAYS * 24 * 3600,
        **common,
    )


def _clear_auth_cookies(resp: Response):
    common = dict(path="/")
    if settings.COOKIE_DOMAIN:
        common["domain"] = settings.COOKIE_DOMAIN
    resp.delete_cookie(ACCESS_COOKIE, **common)
    resp.delete_cookie(REFRESH_COOKIE, **common)


def _issue_session(db: Session, user: User, response: Response) -> None:
    user.refresh_jti = new_jti()
    db.add(user)
    db.commit()
    db.refresh(user)

    access = make_access_token(str(user.id))
    refresh = make_refresh_token(str(user.id), user.refresh_jti)
    _set_auth_cookies(response, access, refresh)


def verify_google_credential(credential: str) -> dict:
    return google_id_token.verify_oauth2_token(
        credential,
        google_requests.Request(),
        settings.GOOGLE_CLIENT_ID,
    )


@router.post("/google", response_model=UserOut)
def google_login(payload: GoogleIn, response: Response, db: Session = Depends(get_db)):
    try:
        idinfo = verify_google_credential(payload.credential)
    except (ValueError, GoogleAuthError):
        raise HTTPException(status_code=401, detail="Invalid Google token")

    sub = idinfo.get("sub")
    email = (idinfo.get("email") or "").lower().strip()
    if not sub or not email:
        raise HTTPException(status_code=400, detail="Invalid Google token")

    user = db.query(User).filter(User.google_sub == sub).first()
    if not user:
        user = User(google_sub=sub, email=email, name=idinfo.get("name") or "User")
        logger.info("Creating user for google_sub=%s", sub)

    _issue_session(db, user, response)
    return user_out(user)


@router.post("/refresh")
def refresh(request: Request, response: Response, db: Session = Depends(get_db)):
    token = request.cookies.get(REFRESH_COOKIE)
    if not token:
        raise HTTPException(status_code=401, detail="Missing refresh token")

    try:
        payload = read_token(token, REFRESH)
    except InvalidToken:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    jti = payload.get("jti")
    try:
        user = db.get(User, uuid.UUID(payload["sub"]))
    except ValueError:
        user = None
    if not user or not jti or user.refresh_jti != jti:
        raise HTTPException(status_code=401, detail="Refresh token revoked")

    _issue_session(db, user, response)
    return {"ok": True}


@router.post("/logout")
def logout(request: Request, response: Response, db: Session = Depends(get_db)):
    # best-effort revoke of the current refresh token
    token = request.cookies.get(REFRESH_COOKIE)
    if token:
        try:
            payload = read_token(token, REFRESH)
        except InvalidToken:
            payload = None
        if payload and payload.get("jti"):
            user = db.query(User).filter(User.refresh_jti == payload["jti"]).first()
            if user:
                user.refresh_jti = None
                db.add(user)
                db.commit()

    _clear_auth_cookies(response)
    return {"message": "Logged out"}
