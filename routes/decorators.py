import io
from functools import wraps

from flask import current_app, send_file, session
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from documents import TextDocumentGenerator
from errors import AuthenticationRequired
from models import db
from services.cart import Cart
from services.identity import IdentityService

CART_KEY = "cart"


def identity_service():
    return IdentityService(db.session, session, current_app.config["PEPPER"])


def session_user():
    """The session's current user, provided the request also carries that user's access token.

    Without a matching valid token the cached login is dropped, so the session
    and the token agree on who is signed in.
    """
    identity = identity_service()
    user = identity.current_user
    if user is None:
        return None
    try:
        verify_jwt_in_request()
    except (JWTExtendedException, PyJWTError):
        identity.forget()
        return None
    if get_jwt_identity() != str(user["id"]):
        identity.forget()
        return None
    return user


def login_required_view(fn):
    """Require a valid access token belonging to the session's current user."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        if session_user() is None:
            raise AuthenticationRequired()
        return fn(*args, **kwargs)

    return wrapper


def admin_required_view(fn):
    @wraps(fn)
    @login_required_view
    def wrapper(*args, **kwargs):
        identity_service().require_admin()
        return fn(*args, **kwargs)

    return wrapper


def load_cart():
    try:
        return Cart.from_dict(session.get(CART_KEY))
    except (TypeError, KeyError, AttributeError):
        current_app.logger.warning("Discarding unreadable cart from session")
        session.pop(CART_KEY, None)
        return Cart()


def save_cart(cart):
    session[CART_KEY] = cart.to_dict()


def cart_payload(cart):
    return {
        "items": cart.to_dict()["items"],
        "products": cart.to_dict()["products"],
        "total_price": cart.total_price(),
        "item_count": cart.item_count(),
    }


def document_generator():
    return current_app.extensions.setdefault("document_generator", TextDocumentGenerator())


def send_document(content, basename):
    generator = document_generator()
    return send_file(
        io.BytesIO(content),
        mimetype=generator.mimetype,
        as_attachment=True,
        download_name=f"{basename}.{generator.extension}",
    )
