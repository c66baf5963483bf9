"""Sales and audit log queries for the admin pages.

Date ranges are whole days: ``start`` is inclusive and everything before
midnight after ``end`` is included too.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, time, timedelta
from typing import List, Optional

from sqlalchemy import func

from models import Booking, Show, ShowTime, SystemLog, User


@dataclass
class ShowSales:
    title: str
    tickets: int
    revenue: float


@dataclass
class DateSales:
    date: str
    tickets: int
    revenue: float


@dataclass
class SalesReport:
    start_date: str
    end_date: str
    total_sales: float
    total_bookings: int
    by_show: List[ShowSales] = field(default_factory=list)
    by_date: List[DateSales] = field(default_factory=list)

    def to_dict(self):
        return asdict(self)


@dataclass
class LogEntry:
    id: int
    action: str
    details: Optional[str]
    username: str
    timestamp: Optional[str]

    def to_dict(self):
        return asdict(self)


def day_bounds(start, end):
    """``[start 00:00, end + 1 day 00:00)`` as datetimes."""
    lower = datetime.combine(start, time.min)
    upper = datetime.combine(end + timedelta(days=1), time.min)
    return lower, upper


def _in_range(column, start, end):
    lower, upper = day_bounds(start, end)
    return (column >= lower) & (column < upper)


def sales_summary(session, start, end):
    in_range = _in_range(Booking.created_at, start, end)

    total_bookings, total_sales = (
        session.query(func.count(Booking.id), func.sum(Booking.total_price)).filter(in_range).one()
    )

    revenue = func.sum(Booking.total_price).label("revenue")
    by_show = (
        session.query(Show.title, func.count(Booking.id), revenue)
        .join(ShowTime, Booking.show_time_id == ShowTime.id)
        .join(Show, ShowTime.show_id == Show.id)
        .filter(in_range)
        .group_by(Show.id, Show.title)
        .order_by(revenue.desc())
        .all()
    )

    day = func.date(Booking.created_at).label("day")
    by_date = (
        session.query(day, func.count(Booking.id), func.sum(Booking.total_price))
        .filter(in_range)
        .group_by(day)
        .order_by(day.desc())
        .all()
    )

    return SalesReport(
        start_date=start.isoformat(),
        end_date=end.isoformat(),
        total_sales=round(total_sales or 0, 2),
        total_bookings=total_bookings or 0,
        by_show=[ShowSales(title=t, tickets=n, revenue=round(r or 0, 2)) for t, n, r in by_show],
        by_date=[DateSales(date=str(d), tickets=n, revenue=round(r or 0, 2)) for d, n, r in by_date],
    )


def list_logs(session, start, end):
    rows = (
        session.query(SystemLog, User.username)
        .outerjoin(User, SystemLog.user_id == User.id)
        .filter(_in_range(SystemLog.created_at, start, end))
        .order_by(SystemLog.created_at.desc(), SystemLog.id.desc())
        .all()
    )
    return [
        LogEntry(
            id=entry.id,
            action=entry.action,
            details=entry.details,
            username=username or "System",
            timestamp=entry.created_at.isoformat(sep=" ") if entry.created_at else None,
        )
        for entry, username in rows
    ]
