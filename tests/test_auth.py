from smartmess.models import Mess, User

from .conftest import login


def test_login_stores_normalized_role(client, mess_setup):
    response = login(client, mess_setup["owner"].email)

    data = response.json()["data"]
    assert data["role"] == "MESS_OWNER"
    assert data["messId"] == mess_setup["mess"].id
    assert client.get("/api/auth/me").json()["data"]["email"] == "owner@smartmess.in"


def test_login_rejects_bad_password(client, mess_setup):
    response = client.post(
        "/api/auth/login", json={"email": mess_setup["owner"].email, "password": "wrong-pass"}
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Invalid credentials"}


def test_inactive_member_cannot_login(client, mess_setup):
    response = client.post(
        "/api/auth/login", json={"email": mess_setup["inactive"].email, "password": "secret-pass"}
    )

    assert response.status_code == 403


def test_owner_signup_creates_mess(client, db):
    response = client.post(
        "/api/auth/signup",
        json={
            "email": "New.Owner@smartmess.in",
            "fullName": "New Owner",
            "password": "longenough",
            "role": "mess-owner",
            "messName": "Krishna Mess",
        },
    )

    assert response.status_code == 201
    user = db.query(User).filter(User.email == "new.owner@smartmess.in").one()
    assert user.role == "MESS_OWNER"
    mess = db.query(Mess).filter(Mess.id == user.mess_id).one()
    assert mess.name == "Krishna Mess"
    assert mess.owner_user_id == user.id


def test_member_signup_joins_existing_mess(client, db, mess_setup):
    response = client.post(
        "/api/auth/signup",
        json={
            "email": "joiner@smartmess.in",
            "fullName": "Joiner",
            "password": "longenough",
            "messId": mess_setup["mess"].id,
        },
    )

    assert response.status_code == 201
    assert response.json()["data"]["role"] == "USER"
    assert response.json()["data"]["messId"] == mess_setup["mess"].id


def test_duplicate_email_rejected(client, mess_setup):
    response = client.post(
        "/api/auth/signup",
        json={"email": "asha@smartmess.in", "fullName": "Asha Again", "password": "longenough"},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Email already registered"


def test_admin_cannot_self_register(client):
    response = client.post(
        "/api/auth/signup",
        json={"email": "root@smartmess.in", "fullName": "Root", "password": "longenough", "role": "admin"},
    )

    assert response.status_code == 403


def test_logout_clears_session(client, mess_setup):
    login(client, mess_setup["owner"].email)

    client.post("/api/auth/logout")

    assert client.get("/api/auth/me").status_code == 401
