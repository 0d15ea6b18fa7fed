"""
Auth Module - Routes
=====================
Register, login, logout, current user.
Login sets the auth_token cookie; the browser session cookie is left alone
so the cart bound to it survives the login.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from config.database import get_db
from common.security import get_cookie_kwargs, AUTH_COOKIE
from modules.auth.deps import require_login
from modules.auth.schemas import RegisterIn, LoginIn, user_out
from modules.auth.service import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=201)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    user = auth_service.register(db, payload.email, payload.password, payload.name)
    db.commit()
    return user_out(user)


@router.post("/login")
def login(payload: LoginIn, response: Response, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, payload.email, payload.password)
    response.set_cookie(AUTH_COOKIE, auth_service.issue_token(user), **get_cookie_kwargs())
    return {"message": "Autenticación exitosa.", "user": user_out(user)}


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(AUTH_COOKIE)
    return {"message": "Sesión cerrada correctamente."}


@router.get("/me")
def me(user=Depends(require_login)):
    return user_out(user)
