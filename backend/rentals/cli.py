from datetime import date, timedelta
from decimal import Decimal

import click
from flask import Flask

from .extensions import db
from .models import Booking, BookingStatus, Property, User
from .services.auth_service import purge_expired_sessions
from .utils.crypto import hash_password


def _get_or_create_user(username: str, password: str, **extra) -> User:
    user = User.query.filter_by(username=username).first()
    if user:
        return user
    password_hash, salt = hash_password(password)
    user = User(username=username, password_hash=password_hash, salt=salt, **extra)
    db.session.add(user)
    db.session.flush()
    return user


def register_cli(app: Flask) -> None:
    @app.cli.command("purge-sessions")
    def purge_sessions():
        """Delete expired login sessions."""
        deleted = purge_expired_sessions()
        click.echo(f"Removed {deleted} expired session(s)")

    @app.cli.command("seed-demo")
    @click.option("--password", default="password", show_default=True, help="Password for the demo accounts")
    def seed_demo(password: str):
        """Create a demo host, a demo guest and a couple of listings."""
        host = _get_or_create_user(
            "host", password, email="host@example.com", first_name="Hana", last_name="Host"
        )
        guest = _get_or_create_user(
            "guest", password, email="guest@example.com", first_name="Gus", last_name="Guest"
        )

        if Property.query.filter_by(owner_id=host.id).count() == 0:
            cabin = Property(
                owner_id=host.id,
                name="Lakeside Cabin",
                description="Quiet cabin by the water",
                address="12 Shore Rd, Lake Town, USA",
                price_per_night=Decimal("120.00"),
                rooms=2,
            )
            loft = Property(
                owner_id=host.id,
                name="City Loft",
                description="Downtown loft close to everything",
                address="5 Main St, Springfield, USA",
                price_per_night=Decimal("95.50"),
                rooms=1,
            )
            db.session.add_all([cabin, loft])
            db.session.flush()

            start = date.today() + timedelta(days=14)
            end = start + timedelta(days=3)
            db.session.add(
                Booking(
                    property_id=cabin.id,
                    renter_id=guest.id,
                    start_date=start,
                    end_date=end,
                    total_price=cabin.price_per_night * 3,
                    status=BookingStatus.PENDING,
                )
            )

        db.session.commit()
        click.echo("Demo data ready (users: host, guest)")
