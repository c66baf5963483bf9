"""Printable documents: tickets, sales reports and system log exports.

Callers build a plain record with one of the ``*_record`` helpers and hand it
to a ``DocumentGenerator``. The generator owns the layout; the rest of the
application only knows the record shapes.
"""

THEATRE_NAME = "Cineverse Theatre"


def ticket_record(booking_id, show_title, show_date, start_time, seats, customer_name, total_price):
    return {
        "booking_id": booking_id,
        "show_title": show_title,
        "show_date": show_date,
        "start_time": start_time,
        "seats": list(seats),
        "customer_name": customer_name,
        "total_price": total_price,
    }


def sales_report_record(start_date, end_date, total_sales, total_bookings, shows):
    return {
        "start_date": start_date,
        "end_date": end_date,
        "total_sales": total_sales,
        "total_bookings": total_bookings,
        "shows": [
            {"title": s["title"], "tickets": s["tickets"], "revenue": s["revenue"]} for s in shows
        ],
    }


def log_export_record(entries):
    return {
        "entries": [
            {
                "id": e["id"],
                "action": e["action"],
                "details": e["details"],
                "username": e.get("username") or "System",
                "timestamp": e["timestamp"],
            }
            for e in entries
        ]
    }


class DocumentGenerator:
    """Interface for turning records into downloadable documents."""

    mimetype = "application/octet-stream"
    extension = "bin"

    def render_ticket(self, record) -> bytes:
        raise NotImplementedError

    def render_sales_report(self, record) -> bytes:
        raise NotImplementedError

    def render_log_export(self, record) -> bytes:
        raise NotImplementedError


class TextDocumentGenerator(DocumentGenerator):
    mimetype = "text/plain"
    extension = "txt"
    width = 72

    def _finish(self, lines):
        return ("\n".join(lines) + "\n").encode("utf-8")

    def _rule(self):
        return "-" * self.width

    def render_ticket(self, record):
        seat_codes = [seat["seatNumber"] for seat in record["seats"]]
        lines = [
            THEATRE_NAME.center(self.width),
            "E-TICKET".center(self.width),
            f"Booking Reference: #{record['booking_id']}".center(self.width),
            self._rule(),
            record["show_title"].center(self.width),
            f"Date: {record['show_date']}".center(self.width),
            f"Time: {record['start_time']}".center(self.width),
            "",
            "Seats:",
        ]
        # four seats per line
        for start in range(0, len(seat_codes), 4):
            lines.append("  " + ", ".join(seat_codes[start:start + 4]))
        lines += [
            "",
            f"Customer: {record['customer_name']}",
            f"Total Price: ${record['total_price']:.2f}",
            "",
            "Thank you for choosing Cineverse Theatre. Enjoy your movie!",
            "This ticket cannot be replaced if lost or stolen.",
        ]
        return self._finish(lines)

    def render_sales_report(self, record):
        lines = [
            f"{THEATRE_NAME} - Sales Report".center(self.width),
            f"Period: {record['start_date']} to {record['end_date']}".center(self.width),
            self._rule(),
            f"Total Sales: ${record['total_sales']:.2f}",
            f"Total Bookings: {record['total_bookings']}",
            "",
            f"{'Show Title':<40}{'Tickets Sold':>14}{'Revenue':>18}",
        ]
        for show in record["shows"]:
            revenue = f"${show['revenue']:.2f}"
            lines.append(f"{show['title'][:39]:<40}{show['tickets']:>14}{revenue:>18}")
        return self._finish(lines)

    def render_log_export(self, record):
        lines = [
            f"{THEATRE_NAME} - System Logs".center(self.width),
            self._rule(),
            f"{'Time':<21}{'Action':<20}{'User':<14}Details",
        ]
        for entry in record["entries"]:
            lines.append(
                f"{entry['timestamp']:<21}{entry['action'][:19]:<20}"
                f"{entry['username'][:13]:<14}{entry['details'] or ''}"
            )
        return self._finish(lines)
