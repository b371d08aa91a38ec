# seed_db.py

import logging

from sqlalchemy.orm import Session

from qrattend.auth_router import get_password_hash
from qrattend.config import configure_logging
from qrattend.db import SessionLocal, engine, Base
from qrattend.models import ClassRoom, User

logger = logging.getLogger("seed_db")


def seed(db: Session):
    # Define a common password to be hashed
    TEST_PASSWORD = "password123"
    hashed_password = get_password_hash(TEST_PASSWORD)

    test_users = [
        {"staff_no": "L1001", "name": "Dr. Smith", "email": "smith@example.edu", "role": "lecturer"},
        {"staff_no": "S2023/101", "name": "Alice Johnson", "email": "alice@example.edu", "role": "student"},
        {"staff_no": "S2023/102", "name": "Bola Adeyemi", "email": "bola@example.edu", "role": "student"},
    ]

    # Check if users already exist to prevent duplicates
    if db.query(User).count() > 0:
        logger.info("Database already contains users. Skipping seed process.")
        return False

    users = [User(password_hash=hashed_password, **data) for data in test_users]
    db.add_all(users)
    db.flush()

    lecturer, alice, bola = users
    classroom = ClassRoom(
        name="CSC 301",
        subject="Data Structures",
        lecturer_id=lecturer.id,
        latitude=6.5244,
        longitude=3.3792,
    )
    classroom.students.extend([alice, bola])
    db.add(classroom)
    db.commit()

    logger.info("Created %d test users and class %s", len(users), classroom.name)
    logger.info("Login Password for all: %s", TEST_PASSWORD)
    return True


def seed_users():
    Base.metadata.create_all(bind=engine)  # Ensure tables exist
    db = SessionLocal()
    try:
        seed(db)
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    seed_users()
