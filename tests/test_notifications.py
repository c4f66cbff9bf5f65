from dbvclub.models.notification import NotificationType
from dbvclub.services import notifications
from tests.helpers import auth_header, create_user_in_db


def _seed(db, user, count):
    for i in range(count):
        notifications.send(db, user_id=user.id, title=f"Aviso {i}", message="mensagem", type_=NotificationType.INFO)
    db.commit()


def test_inbox_lists_latest_twenty(client, db):
    user = create_user_in_db(db)
    _seed(db, user, 22)

    r = client.get("/notifications", headers=auth_header(user))
    assert r.status_code == 200
    assert len(r.json()) == 20
    assert all(n["read"] is False for n in r.json())


def test_unread_count_and_mark_read(client, db):
    user = create_user_in_db(db)
    _seed(db, user, 3)

    r = client.get("/notifications/unread-count", headers=auth_header(user))
    assert r.json() == {"count": 3}

    target = client.get("/notifications", headers=auth_header(user)).json()[0]
    r = client.patch(f"/notifications/{target['id']}/read", headers=auth_header(user))
    assert r.status_code == 200
    assert r.json()["read"] is True

    r = client.get("/notifications/unread-count", headers=auth_header(user))
    assert r.json() == {"count": 2}


def test_mark_read_of_another_users_notification_404(client, db):
    owner = create_user_in_db(db)
    other = create_user_in_db(db)
    _seed(db, owner, 1)

    target = client.get("/notifications", headers=auth_header(owner)).json()[0]
    r = client.patch(f"/notifications/{target['id']}/read", headers=auth_header(other))
    assert r.status_code == 404
    assert r.json()["detail"] == "Notification not found"


def test_read_all(client, db):
    user = create_user_in_db(db)
    other = create_user_in_db(db)
    _seed(db, user, 4)
    _seed(db, other, 2)

    r = client.patch("/notifications/read-all", headers=auth_header(user))
    assert r.status_code == 200
    assert r.json() == {"updated": 4}

    assert client.get("/notifications/unread-count", headers=auth_header(user)).json() == {"count": 0}
    assert client.get("/notifications/unread-count", headers=auth_header(other)).json() == {"count": 2}
