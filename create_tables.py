# create_tables.py
import argparse
import os

from taskhub.database import Base, SessionLocal, engine, init_db
from taskhub.models import User, UserRole
from taskhub.utils.security import hash_password


def create_tables(drop: bool = False):
    """Create all tables, optionally dropping the existing ones first"""
    if drop:
        Base.metadata.drop_all(bind=engine)
        print("Dropped existing tables")
    init_db()
    print("All tables created successfully!")


def create_default_director():
    """Create a director account from DEFAULT_DIRECTOR_* variables when missing"""
    email = os.getenv("DEFAULT_DIRECTOR_EMAIL")
    password = os.getenv("DEFAULT_DIRECTOR_PASSWORD")
    if not email or not password:
        return

    db = SessionLocal()
    try:
        if db.query(User).filter(User.email == email).first():
            print("Director user already exists")
            return
        db.add(User(
            emp_id=os.getenv("DEFAULT_DIRECTOR_EMP_ID", "DIR-001"),
            name=os.getenv("DEFAULT_DIRECTOR_NAME", "Director"),
            email=email,
            hashed_password=hash_password(password),
            department=os.getenv("DEFAULT_DIRECTOR_DEPARTMENT", "Management"),
            role=UserRole.DIRECTOR,
        ))
        db.commit()
        print(f"Default director created: {email}")
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the TaskHub database schema")
    parser.add_argument("--drop", action="store_true", help="drop existing tables first")
    args = parser.parse_args()
    create_tables(drop=args.drop)
    create_default_director()
