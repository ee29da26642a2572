# backend/usergate/seed_admin.py

import os
from typing import Optional

from usergate.core.config import Settings, settings as default_settings
from usergate.core.database import create_tables, make_engine, make_session_factory
from usergate.core.security import PasswordHasher, default_hasher
from usergate.models.user import User
from usergate.services.user_store import UserStore


def seed_admin(
    store: UserStore,
    email: str,
    password: str,
    name: str,
    hasher: Optional[PasswordHasher] = None,
) -> User:
    """Create the admin, or promote + reset the password of an existing account."""
    hasher = hasher or default_hasher
    return store.upsert_admin(email=email, password_hash=hasher.hash(password), name=name)


def main(settings: Optional[Settings] = None) -> User:
    cfg = settings or default_settings

    # Change these creds anytime (local defaults)
    email = os.getenv("ADMIN_EMAIL", "admin@example.com")
    password = os.getenv("ADMIN_PASSWORD", "Admin1234")
    name = os.getenv("ADMIN_NAME", "Admin User")

    engine = make_engine(cfg.database_url)
    try:
        # make sure tables exist
        create_tables(engine)
        store = UserStore(make_session_factory(engine))
        admin = seed_admin(store, email, password, name, PasswordHasher.from_settings(cfg))
    finally:
        engine.dispose()

    print(f"✅ Admin ready: {admin.email} ({admin.role}) id={admin.id}")
    return admin


if __name__ == "__main__":
    main()
