"""Show listings, seat selection and admin show management."""

from dataclasses import asdict, dataclass, field
from typing import List, Optional

from sqlalchemy import func, select

from documents import ticket_record
from errors import DuplicateShowTime, NotFound, ValidationError
from models import Booking, OrderItem, Product, Show, ShowTime
from seating import (
    MAX_SEATS_PER_SELECTION,
    check_seats_bookable,
    count_available,
    generate_seating_map,
    make_seat,
)
from services.audit import log_action
from services.cart import CartLineItem


@dataclass
class ShowTimeSummary:
    id: int
    show_id: int
    show_date: str
    start_time: str
    price: float
    available_seats: int

    def to_dict(self):
        return asdict(self)


@dataclass
class ShowListing:
    id: int
    title: str
    description: str
    poster: Optional[str]
    duration: int
    show_times: List[ShowTimeSummary] = field(default_factory=list)

    def to_dict(self):
        return asdict(self)


@dataclass
class ShowTimeDetail:
    id: int
    show_id: int
    show_title: str
    show_date: str
    start_time: str
    price: float
    seating_map: List[List[int]]

    def to_dict(self):
        return asdict(self)


@dataclass
class AdminShow:
    id: int
    title: str
    description: str
    poster: Optional[str]
    duration: int
    show_times_count: int

    def to_dict(self):
        return asdict(self)


@dataclass
class ProductSummary:
    id: int
    name: str
    type: str
    price: float

    def to_dict(self):
        return asdict(self)


@dataclass
class BookingSummary:
    id: int
    show_title: str
    description: str
    show_date: str
    start_time: str
    seats: List[dict]
    total_price: float
    status: str
    created_at: Optional[str]

    def to_dict(self):
        return asdict(self)


def _summarize_show_time(show_time):
    return ShowTimeSummary(
        id=show_time.id,
        show_id=show_time.show_id,
        show_date=show_time.show_date,
        start_time=show_time.start_time,
        price=show_time.price,
        available_seats=count_available(show_time.grid),
    )


def list_shows(session, show_date=None):
    """Shows ordered by title with their showtimes.

    With ``show_date`` only showtimes on that day are kept and shows without
    any are dropped; ``None`` is the "all dates" view.
    """
    shows = session.query(Show).order_by(Show.title).all()
    query = session.query(ShowTime).order_by(ShowTime.show_date, ShowTime.start_time)
    if show_date:
        query = query.filter(ShowTime.show_date == show_date)

    by_show = {}
    for show_time in query.all():
        by_show.setdefault(show_time.show_id, []).append(_summarize_show_time(show_time))

    listings = []
    for show in shows:
        show_times = by_show.get(show.id, [])
        if show_date and not show_times:
            continue
        listings.append(
            ShowListing(
                id=show.id,
                title=show.title,
                description=show.description,
                poster=show.poster,
                duration=show.duration,
                show_times=show_times,
            )
        )
    return listings


def list_show_dates(session):
    rows = session.query(ShowTime.show_date).distinct().order_by(ShowTime.show_date).all()
    return [show_date for (show_date,) in rows]


def _get_show_time(session, show_time_id):
    show_time = session.get(ShowTime, show_time_id)
    if show_time is None:
        raise NotFound("Show time not found", {"show_time_id": show_time_id})
    return show_time


def get_showtime(session, show_time_id):
    show_time = _get_show_time(session, show_time_id)
    return ShowTimeDetail(
        id=show_time.id,
        show_id=show_time.show_id,
        show_title=show_time.show.title,
        show_date=show_time.show_date,
        start_time=show_time.start_time,
        price=show_time.price,
        seating_map=show_time.grid,
    )


def build_selection(session, show_time_id, seats):
    """Check a seat selection against the current grid and turn it into a cart line."""
    if not seats:
        raise ValidationError("Please select at least one seat")
    if len(seats) > MAX_SEATS_PER_SELECTION:
        raise ValidationError(f"You can select at most {MAX_SEATS_PER_SELECTION} seats")

    show_time = _get_show_time(session, show_time_id)
    check_seats_bookable(show_time.grid, seats)

    return CartLineItem(
        show_time_id=show_time.id,
        show_id=show_time.show_id,
        show_title=show_time.show.title,
        show_date=show_time.show_date,
        start_time=show_time.start_time,
        seats=[make_seat(seat["row"], seat["col"]) for seat in seats],
        price_per_seat=show_time.price,
    )


def list_products(session):
    products = session.query(Product).order_by(Product.type, Product.name).all()
    return [ProductSummary(id=p.id, name=p.name, type=p.type, price=p.price) for p in products]


def get_product(session, product_id):
    product = session.get(Product, product_id)
    if product is None:
        raise NotFound("Product not found", {"product_id": product_id})
    return product


def list_user_bookings(session, user_id):
    rows = (
        session.query(Booking, ShowTime, Show)
        .join(ShowTime, Booking.show_time_id == ShowTime.id)
        .join(Show, ShowTime.show_id == Show.id)
        .filter(Booking.user_id == user_id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .all()
    )
    return [
        BookingSummary(
            id=booking.id,
            show_title=show.title,
            description=show.description,
            show_date=show_time.show_date,
            start_time=show_time.start_time,
            seats=booking.seat_list,
            total_price=booking.total_price,
            status=booking.status,
            created_at=booking.created_at.isoformat() if booking.created_at else None,
        )
        for booking, show_time, show in rows
    ]


# Admin show management


def _validate_show_fields(title, description, duration):
    if not title or not description:
        raise ValidationError("Please fill all required fields")
    if duration is None or duration <= 0:
        raise ValidationError("Duration must be greater than 0")


def list_admin_shows(session):
    counts = dict(
        session.query(ShowTime.show_id, func.count(ShowTime.id)).group_by(ShowTime.show_id).all()
    )
    shows = session.query(Show).order_by(Show.title).all()
    return [
        AdminShow(
            id=show.id,
            title=show.title,
            description=show.description,
            poster=show.poster,
            duration=show.duration,
            show_times_count=counts.get(show.id, 0),
        )
        for show in shows
    ]


def get_show(session, show_id):
    show = session.get(Show, show_id)
    if show is None:
        raise NotFound("Show not found", {"show_id": show_id})
    return show


def create_show(session, title, description, duration, poster=None, user_id=None):
    _validate_show_fields(title, description, duration)
    show = Show(title=title, description=description, poster=poster or None, duration=duration)
    session.add(show)
    session.flush()
    log_action(session, "Show added", f"Show ID: {show.id} ({title})", user_id)
    session.commit()
    return show


def update_show(session, show_id, title, description, duration, poster=None, user_id=None):
    _validate_show_fields(title, description, duration)
    show = get_show(session, show_id)
    show.title = title
    show.description = description
    show.poster = poster or None
    show.duration = duration
    log_action(session, "Show updated", f"Show ID: {show.id} ({title})", user_id)
    session.commit()
    return show


def delete_show(session, show_id, user_id=None):
    """Delete a show with its showtimes, their bookings and order items."""
    show = get_show(session, show_id)
    title = show.title

    show_time_ids = select(ShowTime.id).where(ShowTime.show_id == show_id)
    booking_ids = select(Booking.id).where(Booking.show_time_id.in_(show_time_ids))
    try:
        session.query(OrderItem).filter(OrderItem.booking_id.in_(booking_ids)).delete(
            synchronize_session="fetch"
        )
        session.query(Booking).filter(Booking.show_time_id.in_(show_time_ids)).delete(
            synchronize_session="fetch"
        )
        session.query(ShowTime).filter(ShowTime.show_id == show_id).delete(
            synchronize_session="fetch"
        )
        session.query(Show).filter(Show.id == show_id).delete(synchronize_session="fetch")
        log_action(session, "Show deleted", f"Show ID: {show_id} ({title})", user_id)
        session.commit()
    except Exception:
        session.rollback()
        raise


def create_showtime(session, show_id, show_date, start_time, price, user_id=None):
    if price is None or price <= 0:
        raise ValidationError("Price must be greater than 0")
    if not show_date or not start_time:
        raise ValidationError("Please fill all required fields")
    get_show(session, show_id)

    existing = (
        session.query(ShowTime.id)
        .filter_by(show_id=show_id, show_date=show_date, start_time=start_time)
        .first()
    )
    if existing:
        raise DuplicateShowTime()

    show_time = ShowTime(show_id=show_id, show_date=show_date, start_time=start_time, price=price)
    show_time.grid = generate_seating_map()
    session.add(show_time)
    log_action(
        session,
        "Show time added",
        f"Show ID: {show_id}, Date: {show_date}, Time: {start_time}",
        user_id,
    )
    session.commit()
    return show_time


def ticket_for_booking(session, booking_id, user):
    """Ticket record for one of ``user``'s bookings (any booking for admins)."""
    booking = session.get(Booking, booking_id)
    if booking is None or (user["role"] != "admin" and booking.user_id != user["id"]):
        raise NotFound("Booking not found", {"booking_id": booking_id})

    show_time = booking.show_time
    return ticket_record(
        booking_id=booking.id,
        show_title=show_time.show.title,
        show_date=show_time.show_date,
        start_time=show_time.start_time,
        seats=booking.seat_list,
        customer_name=booking.user.username,
        total_price=booking.total_price,
    )
