from typing import Optional
from sqlalchemy import update
from sqlalchemy.orm import Session

from database.models import User
from enums.user_role import UserRole
from schemas.auth_schema import UserCreate
from utils.dependencies import hash_password


def create_user(payload: UserCreate, db: Session, role: UserRole = UserRole.USER) -> User:
    user = User(
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
        hashed_password=hash_password(payload.password),
        is_active=True,
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def get_user_by_email(email: str, db: Session) -> Optional[User]:
    return db.query(User).filter_by(email=email).first()


def get_user_by_id(user_id: int, db: Session) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def lock_user(user_id: int, db: Session) -> Optional[User]:
    """Load the user with a row lock held until the transaction ends (no-op on SQLite)."""
    return (
        db.query(User)
        .filter(User.id == user_id)
        .populate_existing()
        .with_for_update()
        .first()
    )


def set_user_role(
    user_id: int,
    role: UserRole,
    db: Session,
    expected: Optional[UserRole] = None,
) -> bool:
    """Change the role inside the caller's transaction. Returns whether a row was changed."""
    stmt = update(User).where(User.id == user_id)
    if expected is not None:
        stmt = stmt.where(User.role == expected)
    result = db.execute(stmt.values(role=role).execution_options(synchronize_session=False))
    return result.rowcount == 1


def ensure_admin(email: str, password: str, name: str, db: Session) -> User:
    user = get_user_by_email(email, db)
    if user is None:
        return create_user(
            UserCreate(name=name, email=email, password=password),
            db,
            role=UserRole.ADMIN,
        )
    if user.role != UserRole.ADMIN:
        user.role = UserRole.ADMIN
        db.commit()
        db.refresh(user)
    return user
