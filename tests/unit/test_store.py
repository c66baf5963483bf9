from datetime import date, timedelta

import pytest

from app import bootstrap_store
from errors import DuplicateShowTime, NotFound, ValidationError
from models import Booking, OrderItem, Product, Show, ShowTime, SystemLog, User
from seating import NON_BOOKABLE, count_available, generate_seating_map, seat_number
from seed import seed_if_empty
from services import catalog
from services.cart import Cart, CartProductLine
from services.checkout import checkout


def _log_count(session):
    return session.query(SystemLog).count()


def test_seed_runs_only_once(app, session):
    bootstrap_store(app)
    assert not seed_if_empty(session, "admin2", "pw", "admin2@theatre.com")

    assert session.query(User).filter_by(role="admin").count() == 1
    assert session.query(Show).count() == 3
    assert session.query(Product).count() == 10
    assert session.query(ShowTime).count() == 6
    assert session.query(SystemLog).filter_by(action="System initialized").count() == 1


def test_seeded_grids_have_aisles():
    grid = generate_seating_map()
    assert len(grid) == 8
    assert all(len(row) == 10 for row in grid)
    assert all(row[4] == NON_BOOKABLE and row[5] == NON_BOOKABLE for row in grid)
    assert count_available(grid) == 64
    assert seat_number(0, 0) == "A1"
    assert seat_number(7, 9) == "H10"


def test_list_shows_groups_by_date(session):
    today = date.today()
    dates = catalog.list_show_dates(session)
    assert dates == [(today + timedelta(days=n)).isoformat() for n in range(3)]

    everything = catalog.list_shows(session)
    assert [show.title for show in everything] == ["Love in Paris", "The Last Detective", "The Phantom Menace"]
    assert sum(len(show.show_times) for show in everything) == 6

    today_only = catalog.list_shows(session, today.isoformat())
    assert [show.title for show in today_only] == ["Love in Paris", "The Phantom Menace"]
    phantom = today_only[1]
    assert [st.start_time for st in phantom.show_times] == ["14:00", "19:30"]
    assert phantom.show_times[0].available_seats == 64


def test_selection_checks_showtime_and_size(session):
    with pytest.raises(NotFound):
        catalog.build_selection(session, 999, [{"row": 0, "col": 0}])
    with pytest.raises(ValidationError):
        catalog.build_selection(session, 1, [])
    with pytest.raises(ValidationError):
        catalog.build_selection(session, 1, [{"row": 0, "col": 0}, {"row": 0, "col": 0}])
    with pytest.raises(ValidationError):
        catalog.build_selection(session, 1, [{"row": 8, "col": 0}])
    with pytest.raises(ValidationError):
        catalog.build_selection(session, 1, [{"row": 0, "col": c} for c in (0, 1, 2, 3, 6, 7, 8, 9)]
                                + [{"row": 1, "col": c} for c in (0, 1, 2)])

    item = catalog.build_selection(session, 1, [{"row": 2, "col": 6}])
    assert item.show_title == "The Phantom Menace"
    assert item.price_per_seat == 12.99
    assert item.seats == [{"row": 2, "col": 6, "seatNumber": "C7"}]


def test_show_crud_logs_each_change(session, customer):
    before = _log_count(session)

    show = catalog.create_show(session, "Night Train", "A thriller on rails.", 95, user_id=1)
    assert _log_count(session) == before + 1

    catalog.update_show(session, show.id, "Night Train 2", "Sequel.", 100, poster="/p.jpg", user_id=1)
    assert session.get(Show, show.id).title == "Night Train 2"
    assert _log_count(session) == before + 2

    catalog.create_showtime(session, show.id, "2030-01-01", "18:00", 9.5, user_id=1)
    assert _log_count(session) == before + 3

    admin_view = {s.title: s.show_times_count for s in catalog.list_admin_shows(session)}
    assert admin_view["Night Train 2"] == 1
    assert admin_view["The Phantom Menace"] == 2

    actions = [e.action for e in session.query(SystemLog).order_by(SystemLog.id).all()[-3:]]
    assert actions == ["Show added", "Show updated", "Show time added"]


def test_show_validation(session):
    with pytest.raises(ValidationError):
        catalog.create_show(session, "Untimed", "No duration", 0)
    with pytest.raises(ValidationError):
        catalog.create_show(session, "", "No title", 90)
    with pytest.raises(ValidationError):
        catalog.create_showtime(session, 1, "2030-01-01", "18:00", 0)
    with pytest.raises(NotFound):
        catalog.create_showtime(session, 999, "2030-01-01", "18:00", 10)
    with pytest.raises(NotFound):
        catalog.update_show(session, 999, "Title", "Desc", 90)


def test_duplicate_showtime_is_rejected(session):
    catalog.create_showtime(session, 1, "2030-01-01", "18:00", 10)
    with pytest.raises(DuplicateShowTime):
        catalog.create_showtime(session, 1, "2030-01-01", "18:00", 12)


def test_delete_show_cascades(session, customer):
    cart = Cart()
    cart.add_showtime_selection(catalog.build_selection(session, 1, [{"row": 0, "col": 0}]))
    cart.add_product(CartProductLine(product_id=1, name="Large Popcorn", price=8.99, quantity=1))
    other = Cart()
    other.add_showtime_selection(catalog.build_selection(session, 3, [{"row": 0, "col": 0}]))
    checkout(session, customer, cart)
    checkout(session, customer, other)
    before = _log_count(session)

    catalog.delete_show(session, 1, user_id=1)

    assert session.get(Show, 1) is None
    assert session.query(ShowTime).filter_by(show_id=1).count() == 0
    assert session.query(Booking).count() == 1
    assert session.query(OrderItem).count() == 0
    assert _log_count(session) == before + 1
    assert catalog.list_user_bookings(session, customer["id"])[0].show_title == "Love in Paris"

    with pytest.raises(NotFound):
        catalog.delete_show(session, 1)


def test_user_bookings_newest_first(session, customer):
    for show_time_id in (1, 2):
        cart = Cart()
        cart.add_showtime_selection(catalog.build_selection(session, show_time_id, [{"row": 1, "col": 1}]))
        checkout(session, customer, cart)

    bookings = catalog.list_user_bookings(session, customer["id"])
    assert [b.start_time for b in bookings] == ["19:30", "14:00"]
    assert bookings[0].seats == [{"row": 1, "col": 1, "seatNumber": "B2"}]
    assert catalog.list_user_bookings(session, 999) == []


def test_ticket_for_booking_is_owner_only(session, customer):
    cart = Cart()
    cart.add_showtime_selection(catalog.build_selection(session, 1, [{"row": 0, "col": 0}]))
    booking_id = checkout(session, customer, cart).booking_ids[0]

    record = catalog.ticket_for_booking(session, booking_id, customer)
    assert record["show_title"] == "The Phantom Menace"
    assert record["customer_name"] == "alice"

    stranger = {"id": 999, "role": "customer"}
    with pytest.raises(NotFound):
        catalog.ticket_for_booking(session, booking_id, stranger)
    assert catalog.ticket_for_booking(session, booking_id, {"id": 1, "role": "admin"})["booking_id"] == booking_id
