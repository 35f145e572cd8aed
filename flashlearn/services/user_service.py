# flashlearn/services/user_service.py
from sqlmodel import select
from flashlearn.database import create_session
from flashlearn.models import User
from flashlearn.core.log_manager import logger

def get_or_create_user(email: str, name: str) -> User:
    """
    Checks if a user exists by email.
    If yes: Updates their display name if it changed.
    If no: Creates a new record.
    Returns: The User database object.
    """
    if not email or not email.strip():
        raise ValueError("Cannot create user without email")
    email = email.strip().lower()

    with create_session() as session:
        # 1. Try to find existing user
        statement = select(User).where(User.email == email)
        user = session.exec(statement).first()

        if user:
            # 2. Sync display name
            if name and user.name != name:
                user.name = name
                session.add(user)
                session.commit()
                session.refresh(user)
                logger.info(f"Updated user profile for: {email}")
            else:
                logger.info(f"User login (existing): {email}")

        else:
            # 3. Create new user
            user = User(email=email, name=name or email)
            session.add(user)
            session.commit()
            session.refresh(user)
            logger.info(f"Created new user: {email}")

        return user
