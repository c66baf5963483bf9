from flask import Blueprint, current_app, jsonify, request, url_for
from marshmallow import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from errors import BookingError
from models import db
from routes.decorators import (
    cart_payload,
    identity_service,
    load_cart,
    login_required_view,
    save_cart,
)
from schemas import error_list, product_line_schema, product_quantity_schema, seat_selection_schema
from services import catalog
from services.cart import CartProductLine
from services.checkout import checkout

cart_bp = Blueprint("cart", __name__, url_prefix="/api/cart")


def _invalid(exc):
    return jsonify({'success': False, 'message': 'Invalid input', 'errors': error_list(exc)}), 400


@cart_bp.route("", methods=["GET"])
def view_cart():
    return jsonify(cart_payload(load_cart()))


@cart_bp.route("", methods=["DELETE"])
def clear_cart():
    cart = load_cart()
    cart.clear()
    save_cart(cart)
    return jsonify(cart_payload(cart))


@cart_bp.route("/seats", methods=["POST"])
@login_required_view
def add_seats():
    try:
        payload = seat_selection_schema.load(request.get_json() or {})
    except ValidationError as exc:
        return _invalid(exc)

    item = catalog.build_selection(db.session, payload["show_time_id"], payload["seats"])
    cart = load_cart()
    cart.add_showtime_selection(item)
    save_cart(cart)
    return jsonify(
        {
            "message": f"{len(item.seats)} seat(s) added for {item.show_title}",
            "cart": cart_payload(cart),
        }
    ), 201


@cart_bp.route("/seats/<int:show_time_id>", methods=["DELETE"])
def remove_seats(show_time_id):
    cart = load_cart()
    cart.remove_showtime_selection(show_time_id)
    save_cart(cart)
    return jsonify(cart_payload(cart))


@cart_bp.route("/products", methods=["POST"])
def add_product():
    try:
        payload = product_line_schema.load(request.get_json() or {})
    except ValidationError as exc:
        return _invalid(exc)

    product = catalog.get_product(db.session, payload["product_id"])
    cart = load_cart()
    cart.add_product(
        CartProductLine(
            product_id=product.id,
            name=product.name,
            price=product.price,
            quantity=payload["quantity"],
        )
    )
    save_cart(cart)
    return jsonify(cart_payload(cart)), 201


@cart_bp.route("/products/<int:product_id>", methods=["PATCH", "PUT"])
def update_product(product_id):
    try:
        payload = product_quantity_schema.load(request.get_json() or {})
    except ValidationError as exc:
        return _invalid(exc)

    cart = load_cart()
    cart.set_product_quantity(product_id, payload["quantity"])
    save_cart(cart)
    return jsonify(cart_payload(cart))


@cart_bp.route("/products/<int:product_id>", methods=["DELETE"])
def remove_product(product_id):
    cart = load_cart()
    cart.remove_product(product_id)
    save_cart(cart)
    return jsonify(cart_payload(cart))


@cart_bp.route("/checkout", methods=["POST"])
@login_required_view
def checkout_cart():
    user = identity_service().require_user()
    cart = load_cart()

    try:
        result = checkout(db.session, user, cart)
    except (BookingError, SQLAlchemyError):
        raise
    except Exception:
        # Cart stays in the session so the user can retry
        current_app.logger.exception("Checkout failed")
        return jsonify({"success": False, "message": "Checkout failed. Please try again."}), 500

    current_app.logger.info(
        "User %s checked out booking(s) %s", user["username"], result.booking_ids
    )
    cart.clear()
    save_cart(cart)
    return jsonify(
        {
            "success": True,
            "message": "Booking confirmed",
            "booking_ids": result.booking_ids,
            "tickets": [
                {
                    **ticket,
                    "download_url": url_for(
                        "booking_api.download_ticket", booking_id=ticket["booking_id"]
                    ),
                }
                for ticket in result.tickets
            ],
            "redirect": url_for("booking_api.my_bookings"),
        }
    ), 201
