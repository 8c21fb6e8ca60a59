import base64
from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from sqlalchemy.pool import StaticPool

from rentals import create_app
from rentals.config import TestConfig as BaseTestConfig
from rentals.extensions import db

# Register every mapper/table before create_all
import rentals.models  # noqa: F401
from rentals.models import Booking, BookingStatus, Property, PropertyImage, Session, User
from rentals.utils.crypto import generate_session_token, hash_password

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-png"
PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")


class PytestConfig(BaseTestConfig):
	SQLALCHEMY_DATABASE_URI = "sqlite://"
	SQLALCHEMY_ENGINE_OPTIONS = {
		"connect_args": {"check_same_thread": False},
		"poolclass": StaticPool,
	}
	PUBLIC_BASE_URL = "http://testserver"


@pytest.fixture(scope="session")
def app(tmp_path_factory):
	PytestConfig.UPLOADS_DIR = str(tmp_path_factory.mktemp("uploads"))
	app = create_app(PytestConfig)
	with app.app_context():
		db.create_all()
		yield app
		db.session.remove()
		db.drop_all()


@pytest.fixture()
def client(app):
	return app.test_client()


@pytest.fixture()
def db_session(app):
	with app.app_context():
		yield db.session
		db.session.rollback()


@pytest.fixture()
def make_user(db_session):
	def _make_user(
		username: str,
		password: str = "Passw0rd!",
		first_name: str = "Test",
		last_name: str = "User",
		email: str | None = None,
	):
		password_hash, salt = hash_password(password)
		u = User(
			username=username,
			password_hash=password_hash,
			salt=salt,
			first_name=first_name,
			last_name=last_name,
			email=email or f"{username}@test.com",
		)
		db_session.add(u)
		db_session.commit()
		return u

	return _make_user


@pytest.fixture()
def make_token(db_session):
	def _make_token(user_id: int, expires_in: timedelta = timedelta(hours=24)) -> str:
		s = Session(
			user_id=user_id,
			token=generate_session_token(),
			expiry=datetime.utcnow() + expires_in,
		)
		db_session.add(s)
		db_session.commit()
		return s.token

	return _make_token


@pytest.fixture()
def auth_header(make_token):
	def _auth_header(user_id: int) -> dict:
		return {"Authorization": f"Bearer {make_token(user_id)}"}

	return _auth_header


@pytest.fixture()
def expired_header(make_token):
	def _expired_header(user_id: int) -> dict:
		token = make_token(user_id, expires_in=timedelta(hours=-1))
		return {"Authorization": f"Bearer {token}"}

	return _expired_header


@pytest.fixture()
def make_listing(db_session):
	def _make_listing(
		owner_id: int,
		name: str = "Listing",
		price: str = "100.00",
		address: str = "1 Main St, Springfield, USA",
		image_path: str | None = None,
	):
		p = Property(
			owner_id=owner_id,
			name=name,
			description="Desc",
			address=address,
			price_per_night=Decimal(price),
			rooms=2,
		)
		db_session.add(p)
		db_session.flush()
		if image_path:
			db_session.add(PropertyImage(property_id=p.id, image_path=image_path, is_primary=True, display_order=0))
		db_session.commit()
		return p

	return _make_listing


@pytest.fixture()
def make_booking(db_session):
	def _make_booking(
		property_id: int,
		renter_id: int,
		start: date = date(2030, 7, 1),
		end: date = date(2030, 7, 4),
		status: str = BookingStatus.PENDING,
		total: str = "300.00",
	):
		b = Booking(
			property_id=property_id,
			renter_id=renter_id,
			start_date=start,
			end_date=end,
			total_price=Decimal(total),
			status=status,
		)
		db_session.add(b)
		db_session.commit()
		return b

	return _make_booking
