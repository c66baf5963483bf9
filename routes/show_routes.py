from flask import Blueprint, jsonify, request

from models import db
from routes.decorators import login_required_view
from services import catalog

show_bp = Blueprint("shows", __name__)

ALL_DATES = "all"


@show_bp.route("/api/shows", methods=["GET"])
def list_shows():
    selected = request.args.get("date") or ALL_DATES
    show_date = None if selected == ALL_DATES else selected

    shows = catalog.list_shows(db.session, show_date)
    return jsonify(
        {
            "selected_date": selected,
            "dates": catalog.list_show_dates(db.session),
            "shows": [show.to_dict() for show in shows],
        }
    )


@show_bp.route("/api/showtimes/<int:show_time_id>", methods=["GET"])
@login_required_view
def get_showtime(show_time_id):
    return jsonify({"show_time": catalog.get_showtime(db.session, show_time_id).to_dict()})


@show_bp.route("/api/products", methods=["GET"])
def list_products():
    return jsonify({"products": [p.to_dict() for p in catalog.list_products(db.session)]})
