"""Turn a cart into bookings.

All bookings of one checkout pass are written in a single transaction. Each
target seat is re-checked against the grid inside that transaction, so a seat
taken since it was put in the cart fails the whole pass with
``SeatAlreadyReserved`` and nothing is persisted.
"""

import json
from dataclasses import dataclass, field
from typing import List

from sqlalchemy import select

from documents import ticket_record
from errors import AuthenticationRequired, EmptyCart, NotFound
from models import Booking, OrderItem, ShowTime
from seating import RESERVED, check_seats_bookable
from services.audit import log_action

BOOKING_CONFIRMED = "confirmed"


@dataclass
class CheckoutResult:
    booking_ids: List[int] = field(default_factory=list)
    tickets: List[dict] = field(default_factory=list)


def _lock_show_time(session, show_time_id):
    stmt = (
        select(ShowTime)
        .where(ShowTime.id == show_time_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    show_time = session.execute(stmt).scalar_one_or_none()
    if show_time is None:
        raise NotFound("Show time not found", {"show_time_id": show_time_id})
    return show_time


def reserve_seats(grid, seats):
    """Return a copy of ``grid`` with ``seats`` marked reserved."""
    check_seats_bookable(grid, seats)
    updated = [list(row) for row in grid]
    for seat in seats:
        updated[seat["row"]][seat["col"]] = RESERVED
    return updated


def write_seating_map(session, show_time, grid):
    show_time.grid = grid
    session.flush()


def _book_line(session, user, item, products):
    booking = Booking(
        user_id=user["id"],
        show_time_id=item.show_time_id,
        seats=json.dumps(item.seats),
        total_price=round(len(item.seats) * item.price_per_seat, 2),
        status=BOOKING_CONFIRMED,
    )
    session.add(booking)
    session.flush()

    show_time = _lock_show_time(session, item.show_time_id)
    write_seating_map(session, show_time, reserve_seats(show_time.grid, item.seats))

    # Concessions go on every booking of the pass
    for product in products:
        session.add(
            OrderItem(booking_id=booking.id, product_id=product.product_id, quantity=product.quantity)
        )
    return booking


def checkout(session, user, cart):
    """Persist every showtime line of ``cart`` for ``user``.

    ``user`` is the session user mapping (``id``, ``username``, ...). The cart
    is left untouched; the caller clears it once this returns.
    """
    if not user:
        raise AuthenticationRequired("Please log in to complete your booking")
    if not cart.items:
        raise EmptyCart()

    bookings = []
    try:
        for item in cart.items:
            bookings.append(_book_line(session, user, item, cart.products))

        booking_ids = [booking.id for booking in bookings]
        log_action(
            session,
            "Booking created",
            f"User {user['username']} created booking(s): {', '.join(str(i) for i in booking_ids)}",
            user["id"],
        )
        session.commit()
    except Exception:
        session.rollback()
        raise

    tickets = [
        ticket_record(
            booking_id=booking.id,
            show_title=item.show_title,
            show_date=item.show_date,
            start_time=item.start_time,
            seats=item.seats,
            customer_name=user["username"],
            total_price=booking.total_price,
        )
        for booking, item in zip(bookings, cart.items)
    ]
    return CheckoutResult(booking_ids=booking_ids, tickets=tickets)
