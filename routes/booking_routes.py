from flask import Blueprint, jsonify

from models import db
from routes.decorators import document_generator, identity_service, login_required_view, send_document
from services import catalog

booking_bp = Blueprint("booking_api", __name__)


@booking_bp.route("/api/bookings/mine", methods=["GET"])
@login_required_view
def my_bookings():
    user = identity_service().require_user()
    bookings = catalog.list_user_bookings(db.session, user["id"])
    return jsonify({"bookings": [booking.to_dict() for booking in bookings]})


@booking_bp.route("/api/bookings/<int:booking_id>/ticket", methods=["GET"])
@login_required_view
def download_ticket(booking_id):
    user = identity_service().require_user()
    record = catalog.ticket_for_booking(db.session, booking_id, user)
    return send_document(document_generator().render_ticket(record), f"ticket-{booking_id}")
