# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Authentication and account management service."""

import logging
import uuid
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from missionledger.models import User
from missionledger.models.enums import UserRole
from missionledger.models.session import Session as SessionModel
from missionledger.schemas.auth import RegisterRequest
from missionledger.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)

SESSION_EXPIRY_DAYS = 7


class AuthServiceError(Exception):
    """Base exception for authentication errors."""


class AccountNotApprovedError(AuthServiceError):
    """Credentials are valid but an admin has not approved the account yet."""


class AuthorizationError(AuthServiceError):
    """The acting user may not perform an admin-only operation."""


def require_admin(user: User) -> None:
    """Raise AuthorizationError unless ``user`` is an active, approved admin."""
    if not (user.is_active and user.is_approved and user.role == UserRole.ADMIN):
        raise AuthorizationError("Admin access required")


def is_first_run(db: Session) -> bool:
    """Check if this is the first run (no users exist)."""
    return db.query(User).count() == 0


def register_user(db: Session, data: RegisterRequest) -> User:
    """Register a new user.

    The first user becomes an approved admin. Everyone after that starts
    unapproved and cannot sign in until an admin approves the account.
    """
    first_run = is_first_run(db)

    user = User(
        username=data.username,
        email=data.email,
        hashed_password=get_password_hash(data.password),
        full_name=data.full_name,
        role=UserRole.ADMIN if first_run else UserRole.USER,
        is_approved=first_run,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"Registered user {user.username} (role={user.role.value})")
    return user


def authenticate(db: Session, username: str, password: str) -> User | None:
    """Authenticate a user by username and password.

    Raises:
        AccountNotApprovedError: If the credentials match an account that is
            still waiting for approval.
    """
    user = db.query(User).filter(User.username == username).first()
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    if not user.is_active:
        return None
    if not user.is_approved:
        raise AccountNotApprovedError("Account is pending admin approval")
    return user


def create_session(db: Session, user_id: uuid.UUID) -> str:
    """Create a new session for a user."""
    token = str(uuid.uuid4())
    expires_at = datetime.utcnow() + timedelta(days=SESSION_EXPIRY_DAYS)

    session = SessionModel(
        user_id=user_id,
        token=token,
        expires_at=expires_at,
    )
    db.add(session)
    db.commit()
    return token


def get_session(db: Session, token: str) -> SessionModel | None:
    """Get a valid session by token."""
    session = db.query(SessionModel).filter(SessionModel.token == token).first()
    if not session:
        return None
    if session.expires_at < datetime.utcnow():
        db.delete(session)
        db.commit()
        return None
    return session


def delete_session(db: Session, token: str) -> bool:
    """Delete a session by token."""
    session = db.query(SessionModel).filter(SessionModel.token == token).first()
    if session:
        db.delete(session)
        db.commit()
        return True
    return False


def cleanup_expired_sessions(db: Session) -> int:
    """Delete all expired sessions. Returns count of deleted sessions."""
    count = (
        db.query(SessionModel)
        .filter(SessionModel.expires_at < datetime.utcnow())
        .delete()
    )
    db.commit()
    return count


def get_user_by_id(db: Session, user_id: uuid.UUID) -> User | None:
    """Get a user by ID."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_username(db: Session, username: str) -> User | None:
    """Get a user by username."""
    return db.query(User).filter(User.username == username).first()


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email."""
    return db.query(User).filter(User.email == email).first()


def list_users(db: Session, admin: User) -> list[User]:
    """List all users, unapproved accounts first."""
    require_admin(admin)
    return db.query(User).order_by(User.is_approved, User.username).all()


def approve_user(db: Session, target: User, admin: User) -> User:
    """Approve a pending account so it can sign in."""
    require_admin(admin)
    target.is_approved = True
    db.commit()
    db.refresh(target)
    logger.info(f"User {target.username} approved by {admin.username}")
    return target


def set_role(db: Session, target: User, role: UserRole, admin: User) -> User:
    """Change a user's role. Admins cannot demote themselves."""
    require_admin(admin)
    if target.id == admin.id and role != UserRole.ADMIN:
        raise AuthorizationError("Admins cannot remove their own admin role")
    target.role = role
    db.commit()
    db.refresh(target)
    logger.info(f"User {target.username} is now {role.value} (by {admin.username})")
    return target
