from datetime import date, timedelta

from models import Product, Show, ShowTime, User
from seating import generate_seating_map
from services.audit import log_action
from services.identity import hash_password

seed_shows = [
    {
        "title": "The Phantom Menace",
        "description": "An epic space saga about a young hero's journey to save the galaxy.",
        "poster": "/images/phantom_menace.jpg",
        "duration": 136,
    },
    {
        "title": "Love in Paris",
        "description": "A romantic comedy about finding love in the city of lights.",
        "poster": "/images/love_paris.jpg",
        "duration": 118,
    },
    {
        "title": "The Last Detective",
        "description": "A gripping mystery thriller with unexpected twists.",
        "poster": "/images/last_detective.jpg",
        "duration": 142,
    },
]

seed_products = [
    ("Large Popcorn", "snack", 8.99),
    ("Medium Popcorn", "snack", 6.99),
    ("Small Popcorn", "snack", 4.99),
    ("Large Soda", "drink", 5.99),
    ("Medium Soda", "drink", 4.99),
    ("Small Soda", "drink", 3.99),
    ("Chocolate Bar", "snack", 3.99),
    ("Nachos", "snack", 7.99),
    ("Hot Dog", "snack", 6.99),
    ("Water Bottle", "drink", 2.99),
]

# (show index, days from today, start time, price)
seed_show_times = [
    (0, 0, "14:00", 12.99),
    (0, 0, "19:30", 14.99),
    (1, 0, "16:30", 12.99),
    (1, 1, "18:00", 14.99),
    (2, 1, "20:30", 14.99),
    (2, 2, "15:00", 12.99),
]


def seed_if_empty(session, admin_username, admin_password, admin_email, pepper="", today=None):
    """Insert the starter data unless an admin already exists.

    Returns True when data was inserted.
    """
    if session.query(User.id).filter_by(role="admin").first():
        return False

    today = today or date.today()

    session.add(
        User(
            username=admin_username,
            password_hash=hash_password(admin_password, pepper),
            email=admin_email,
            role="admin",
        )
    )

    shows = [Show(**data) for data in seed_shows]
    session.add_all(shows)
    session.add_all(Product(name=name, type=kind, price=price) for name, kind, price in seed_products)
    session.flush()

    for show_index, offset, start_time, price in seed_show_times:
        show_time = ShowTime(
            show_id=shows[show_index].id,
            show_date=(today + timedelta(days=offset)).isoformat(),
            start_time=start_time,
            price=price,
        )
        show_time.grid = generate_seating_map()
        session.add(show_time)

    log_action(session, "System initialized", "Database created with initial data")
    session.commit()
    return True


if __name__ == "__main__":
    from app import create_app
    from models import db

    app = create_app({"SEED_ON_STARTUP": False})
    with app.app_context():
        db.create_all()
        created = seed_if_empty(
            db.session,
            app.config["ADMIN_USERNAME"],
            app.config["ADMIN_PASSWORD"],
            app.config["ADMIN_EMAIL"],
            app.config["PEPPER"],
        )
        if created:
            app.logger.info("Seeding complete!")
        else:
            app.logger.info("Admin user already exists, nothing to seed")
