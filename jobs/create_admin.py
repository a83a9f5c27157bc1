# jobs/create_admin.py

import argparse
import getpass
from typing import Optional

from sqlalchemy.orm import Session

import models
from database import Base, SessionLocal, engine


def create_or_reset_admin(db: Session, username: str, password: str, email: Optional[str] = None) -> models.User:
    """
    Creates the admin login, or resets its password when the username already exists.
    """
    user = db.query(models.User).filter_by(username=username).first()
    if not user:
        user = models.User(username=username, email=email)
        db.add(user)
    elif email:
        user.email = email
    user.set_password(password)
    db.commit()
    db.refresh(user)
    return user


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create or reset an admin user.")
    parser.add_argument("username")
    parser.add_argument("--email", default=None)
    args = parser.parse_args()

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        user = create_or_reset_admin(db, args.username, getpass.getpass("Password: "), args.email)
        print(f"--- Admin user '{user.username}' is ready. ---")
    finally:
        db.close()
