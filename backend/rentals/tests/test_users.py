from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as OrmSession

from rentals.models import Booking, BookingStatus, Property, PropertyImage, Review, Session, User


def test_update_user_self_only(client, make_user, auth_header):
	u = make_user("usr_upd")
	other = make_user("usr_upd_other")

	r = client.put(f"/api/users/{u.id}", json={"firstName": "Hack"}, headers=auth_header(other.id))
	assert r.status_code == 403

	r = client.put(f"/api/users/{u.id}", json={}, headers=auth_header(u.id))
	assert r.status_code == 400
	assert r.get_json()["message"] == "No fields to update"

	r = client.put(
		f"/api/users/{u.id}",
		json={"firstName": "New", "lastName": "Name", "email": "new@test.com"},
		headers=auth_header(u.id),
	)
	assert r.status_code == 200
	data = r.get_json()["data"]
	assert data["firstName"] == "New"
	assert data["lastName"] == "Name"
	assert data["email"] == "new@test.com"


def test_update_user_username_conflict_409(client, make_user, auth_header):
	u = make_user("usr_conflict")
	make_user("usr_conflict_taken")

	r = client.put(f"/api/users/{u.id}", json={"username": "usr_conflict_taken"}, headers=auth_header(u.id))
	assert r.status_code == 409


def test_update_password_rehashes(client, make_user, auth_header):
	u = make_user("usr_pw", password="old-pw")
	old_salt = u.salt

	r = client.put(f"/api/users/{u.id}", json={"password": "new-pw"}, headers=auth_header(u.id))
	assert r.status_code == 200
	assert User.query.get(u.id).salt != old_salt

	r = client.post("/api/login", json={"username": "usr_pw", "password": "old-pw"})
	assert r.status_code == 401
	r = client.post("/api/login", json={"username": "usr_pw", "password": "new-pw"})
	assert r.status_code == 200


def test_delete_user_removes_everything(client, db_session, make_user, auth_header, make_listing, make_booking):
	host = make_user("usr_del_host")
	guest = make_user("usr_del_guest")
	other_host = make_user("usr_del_other_host")

	own_prop = make_listing(host.id, image_path="/uploads/properties/gone.png")
	foreign_prop = make_listing(other_host.id)
	make_booking(own_prop.id, guest.id, status=BookingStatus.APPROVED)
	make_booking(foreign_prop.id, host.id, status=BookingStatus.APPROVED)
	db_session.add_all([
		Review(property_id=own_prop.id, renter_id=guest.id, rating=5, comment="x"),
		Review(property_id=foreign_prop.id, renter_id=host.id, rating=4, comment="y"),
	])
	db_session.commit()

	host_id, own_prop_id, foreign_prop_id = host.id, own_prop.id, foreign_prop.id
	headers = auth_header(host_id)

	r = client.delete(f"/api/users/{guest.id}", headers=headers)
	assert r.status_code == 403

	r = client.delete(f"/api/users/{host_id}", headers=headers)
	assert r.status_code == 200

	db_session.expire_all()
	assert User.query.get(host_id) is None
	assert Session.query.filter_by(user_id=host_id).count() == 0
	assert Property.query.filter_by(owner_id=host_id).count() == 0
	assert PropertyImage.query.filter_by(property_id=own_prop_id).count() == 0
	assert Booking.query.filter_by(property_id=own_prop_id).count() == 0
	assert Booking.query.filter_by(renter_id=host_id).count() == 0
	assert Review.query.filter_by(property_id=own_prop_id).count() == 0
	assert Review.query.filter_by(renter_id=host_id).count() == 0

	# other users' data stays
	assert Property.query.get(foreign_prop_id) is not None
	assert User.query.get(guest.id) is not None

	r = client.get("/api/users/me", headers=headers)
	assert r.status_code == 401


def test_delete_user_rolls_back_on_failure(client, make_user, auth_header, make_listing, make_booking, monkeypatch):
	host = make_user("usr_del_fail_host")
	guest = make_user("usr_del_fail_guest")
	prop = make_listing(host.id)
	make_booking(prop.id, guest.id)
	host_id, prop_id = host.id, prop.id
	headers = auth_header(host_id)

	def _fail_commit(self):
		raise SQLAlchemyError("commit failed")

	monkeypatch.setattr(OrmSession, "commit", _fail_commit)

	r = client.delete(f"/api/users/{host_id}", headers=headers)
	assert r.status_code == 500
	assert r.get_json()["message"] == "Internal server error while deleting user"

	monkeypatch.undo()
	assert User.query.get(host_id) is not None
	assert Property.query.get(prop_id) is not None
	assert Booking.query.filter_by(property_id=prop_id).count() == 1
	assert Session.query.filter_by(user_id=host_id).count() == 1
