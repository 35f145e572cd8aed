import secrets
from typing import Optional
import dotenv
import os
dotenv.load_dotenv("secrets.env")

SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    SECRET_KEY = secrets.token_hex(32)

DATABASE_URL = os.getenv("FLASHLEARN_DATABASE_URL", "sqlite:///db/flashlearn.db")

LOG_LEVEL = os.getenv("FLASHLEARN_LOG_LEVEL", "INFO").upper()

# Delay before the back side of a card is shown automatically
AUTO_REVEAL_DELAY_MS = int(os.getenv("FLASHLEARN_AUTO_REVEAL_MS", "5000"))

# IANA name (e.g. "Europe/Berlin"). Unset means the server's local timezone.
STUDY_TIMEZONE: Optional[str] = os.getenv("FLASHLEARN_TIMEZONE") or None

# No auth: everyone who opens the app studies as this user
LOCAL_USER_EMAIL = os.getenv("LOCAL_USER_EMAIL", "learner@localhost")
LOCAL_USER_NAME = os.getenv("LOCAL_USER_NAME", "Learner")

MAX_IMPORT_CARDS = 500
