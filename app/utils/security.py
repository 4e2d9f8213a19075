from passlib.context import CryptContext
from dotenv import load_dotenv
import os

load_dotenv()

# 1. THE KEYS
SECRET_KEY = os.getenv("SECRET_KEY", "alumni_network_dev_key_CHANGE_THIS")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

# 2. THE PASSWORD TOOLS (Argon2)
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def verify_password(plain_password, hashed_password):
    """Checks if the typed password matches the saved hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    """Converts a plain password into an argon2 hash."""
    return pwd_context.hash(password)
