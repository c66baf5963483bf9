"""Login, registration and the "current user" kept in the session cache."""

import json

import bcrypt
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from errors import (
    AdminRequired,
    AuthenticationRequired,
    DuplicateIdentity,
    InvalidCredentials,
    ValidationError,
)
from models import User
from services.audit import log_action

SESSION_KEY = "currentUser"
SESSION_FIELDS = ("id", "username", "email", "role")

# bcrypt ignores (or rejects, depending on version) anything past 72 bytes
BCRYPT_MAX_BYTES = 72


def _peppered(password, pepper):
    return password.encode('utf-8') + pepper.encode('utf-8')


def max_password_bytes(pepper=""):
    return BCRYPT_MAX_BYTES - len(pepper.encode("utf-8"))


def password_fits(password, pepper=""):
    """True when password and pepper together stay within bcrypt's input limit."""
    return len(_peppered(password or "", pepper)) <= BCRYPT_MAX_BYTES


def hash_password(password, pepper=""):
    if not password_fits(password, pepper):
        raise ValidationError(
            f"Password must be at most {max_password_bytes(pepper)} bytes",
            {"field": "password"},
        )
    return bcrypt.hashpw(_peppered(password, pepper), bcrypt.gensalt())


def verify_password(entered_password, stored_hashed_password, pepper=""):
    if not password_fits(entered_password, pepper):
        return False
    return bcrypt.checkpw(_peppered(entered_password, pepper), stored_hashed_password)


class IdentityService:
    """Authenticates users against the store and tracks who is logged in.

    ``cache`` is any mutable mapping that survives between calls for the same
    user, e.g. the Flask session. The logged-in user is stored in it under
    ``currentUser`` as a JSON string.
    """

    def __init__(self, session, cache, pepper=""):
        self.session = session
        self.cache = cache
        self.pepper = pepper

    @property
    def current_user(self):
        raw = self.cache.get(SESSION_KEY)
        if raw is None:
            return None
        try:
            user = json.loads(raw)
            if not all(field in user for field in SESSION_FIELDS):
                raise ValueError("incomplete session entry")
        except (TypeError, ValueError):
            self.cache.pop(SESSION_KEY, None)
            return None
        return user

    @property
    def is_authenticated(self):
        return self.current_user is not None

    @property
    def is_admin(self):
        user = self.current_user
        return bool(user) and user["role"] == "admin"

    def require_user(self):
        user = self.current_user
        if user is None:
            raise AuthenticationRequired()
        return user

    def require_admin(self):
        user = self.require_user()
        if user["role"] != "admin":
            raise AdminRequired()
        return user

    def _remember(self, user):
        self.cache[SESSION_KEY] = json.dumps(user.to_session_dict())

    def login(self, username, password):
        user = self.session.query(User).filter_by(username=username).first()
        # Same failure for an unknown user and a wrong password
        if user is None or not verify_password(password, user.password_hash, self.pepper):
            raise InvalidCredentials()

        log_action(self.session, "User login", f"User {username} logged in", user.id)
        self.session.commit()
        self._remember(user)
        return user

    def register(self, username, password, email):
        existing = (
            self.session.query(User.id)
            .filter(or_(User.username == username, User.email == email))
            .first()
        )
        if existing:
            raise DuplicateIdentity()

        user = User(
            username=username,
            password_hash=hash_password(password, self.pepper),
            email=email,
            role="customer",
        )
        try:
            self.session.add(user)
            self.session.flush()
            log_action(self.session, "User registration", f"New user {username} registered", user.id)
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise DuplicateIdentity()

        self._remember(user)
        return user

    def logout(self):
        user = self.current_user
        if user:
            log_action(self.session, "User logout", f"User {user['username']} logged out", user["id"])
            self.session.commit()
        self.cache.pop(SESSION_KEY, None)

    def forget(self):
        """Drop the cached login without an audit entry, e.g. when its token has lapsed."""
        self.cache.pop(SESSION_KEY, None)
