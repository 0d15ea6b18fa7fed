"""
Auth Module - Service Layer
=============================
Registration and credential verification.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from common.exceptions import AuthenticationError, DuplicateError
from common.security import hash_password, verify_password, create_token
from modules.user.models import User, UserRole

logger = logging.getLogger("neonmarket.auth")


class AuthService:
    """Handles account creation, login and token issuance."""

    def register(self, db: Session, email: str, password: str, name: str,
                 role: Optional[str] = None) -> User:
        email = email.strip().lower()
        if db.query(User.id).filter(User.email == email).first():
            raise DuplicateError("El correo ya se encuentra registrado.")

        user = User(
            email=email,
            name=name.strip(),
            password_hash=hash_password(password),
            role=role or UserRole.CUSTOMER.value,
        )
        db.add(user)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            raise DuplicateError("El correo ya se encuentra registrado.")

        logger.info(f"User #{user.id} registered ({user.email})")
        return user

    def authenticate(self, db: Session, email: str, password: str) -> User:
        user = db.query(User).filter(
            User.email == email.strip().lower(),
            User.is_active == True,  # noqa: E712
        ).first()
        if not user or not verify_password(password, user.password_hash):
            raise AuthenticationError("Credenciales inválidas.")
        return user

    def issue_token(self, user: User) -> str:
        return create_token({"sub": str(user.id), "role": user.role})


# Singleton
auth_service = AuthService()
