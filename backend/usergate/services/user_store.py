import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from usergate.core.errors import StoreError, StoreErrorKind
from usergate.models.user import Role, User

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "role")


class UserStore:
    """SQLAlchemy-backed access to the users table.

    Every call runs in its own short session. Database failures come out as
    `StoreError` with a `StoreErrorKind`; callers never see raw SQLAlchemy
    exceptions. Email uniqueness is left to the unique index so two racing
    signups cannot both win.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db: Session = self._session_factory()
        try:
            yield db
        except IntegrityError as e:
            db.rollback()
            raise StoreError(StoreErrorKind.DUPLICATE_EMAIL, "email already exists") from e
        except OperationalError as e:
            db.rollback()
            raise StoreError(StoreErrorKind.UNAVAILABLE, "database unavailable") from e
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(StoreErrorKind.DATABASE_ERROR, "database error") from e
        finally:
            db.close()

    def ping(self) -> None:
        with self._session() as db:
            db.execute(text("SELECT 1"))

    def find_by_email(self, email: str) -> Optional[User]:
        with self._session() as db:
            return db.query(User).filter(User.email == email).first()

    def find_by_id(self, user_id: str) -> Optional[User]:
        with self._session() as db:
            return db.get(User, user_id)

    def list_all(self) -> list[User]:
        with self._session() as db:
            return db.query(User).order_by(User.created_at.desc()).all()

    def create(self, email: str, password_hash: str, name: str, role: Role = Role.USER) -> User:
        with self._session() as db:
            user = User(
                email=email,
                password_hash=password_hash,
                name=name,
                role=Role(role).value,
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            return user

    def update(self, user_id: str, fields: dict[str, Any]) -> User:
        with self._session() as db:
            user = db.get(User, user_id)
            if user is None:
                raise StoreError(StoreErrorKind.NOT_FOUND, f"user {user_id} not found")

            for k, v in fields.items():
                if k not in UPDATABLE_FIELDS:
                    raise ValueError(f"field not updatable: {k}")
                if k == "role":
                    v = Role(v).value
                setattr(user, k, v)

            db.commit()
            db.refresh(user)
            return user

    def delete(self, user_id: str) -> None:
        with self._session() as db:
            user = db.get(User, user_id)
            if user is None:
                raise StoreError(StoreErrorKind.NOT_FOUND, f"user {user_id} not found")

            db.delete(user)
            db.commit()

    def upsert_admin(self, email: str, password_hash: str, name: str) -> User:
        """Create the admin, or promote an existing row and reset its password."""
        with self._session() as db:
            user = db.query(User).filter(User.email == email).first()
            if user:
                user.role = Role.ADMIN.value
                user.password_hash = password_hash
                logger.info("Promoted existing user %s to ADMIN", user.id)
            else:
                user = User(
                    email=email,
                    password_hash=password_hash,
                    name=name,
                    role=Role.ADMIN.value,
                )
                db.add(user)

            db.commit()
            db.refresh(user)
            return user
