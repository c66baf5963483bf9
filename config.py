import os

from dotenv import load_dotenv

load_dotenv()


# Must be set in the environment (or .env) unless TESTING is on
REQUIRED_SECRETS = ("SECRET_KEY", "JWT_SECRET_KEY", "PEPPER")


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///theatre_booking.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.getenv("SECRET_KEY")

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
    JWT_TOKEN_LOCATION = ["cookies", "headers"]
    JWT_COOKIE_SECURE = False
    JWT_COOKIE_CSRF_PROTECT = False

    # Appended to every password before hashing
    PEPPER = os.getenv("PEPPER")

    ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@theatre.com")

    SEED_ON_STARTUP = os.getenv("SEED_ON_STARTUP", "1") not in ("0", "false", "False")
