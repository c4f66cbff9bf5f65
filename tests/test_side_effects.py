"""
판정 이후 보상 연쇄(best-effort) 격리 테스트.

- 알림 전송 실패해도 판정 응답/상태/포인트는 정상
- 특기 완료 검사가 실패해도 클래스 진행률 검사는 실행됨
"""

from sqlalchemy import select

from dbvclub.models.specialty import RequirementStatus, UserRequirement, UserSpecialty, UserSpecialtyStatus
from dbvclub.models.user import Role, DbvClass
from dbvclub.services import notifications, progress
from tests.helpers import (
    auth_header,
    create_class_requirements,
    create_club,
    create_specialty_in_db,
    create_user_in_db,
    get_user,
    ledger_entries,
    notifications_for,
)


def _boom(*args, **kwargs):
    raise RuntimeError("notification backend down")


def test_notification_failure_does_not_block_verdict_or_bonus(client, db, monkeypatch):
    monkeypatch.setattr(notifications, "send", _boom)

    club = create_club(db)
    staff = create_user_in_db(db, role=Role.OWNER, club=club)
    member = create_user_in_db(db, club=club)
    requirements = create_class_requirements(db, dbv_class=DbvClass.AMIGO, count=4)

    r = client.post(
        f"/specialties/requirement/{member.id}/{requirements[0].id}/APPROVED",
        headers=auth_header(staff),
    )
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "APPROVED"

    user = get_user(db, member.id)
    assert user.points == 100
    assert user.last_class_milestone == 25
    assert len(ledger_entries(db, member.id)) == 1
    assert notifications_for(db, member.id) == []


def test_notification_failure_still_stages_waiting_approval(client, db, monkeypatch):
    monkeypatch.setattr(notifications, "send", _boom)

    club = create_club(db)
    owner = create_user_in_db(db, role=Role.OWNER, club=club)
    member = create_user_in_db(db, club=club)
    specialty = create_specialty_in_db(db, requirement_count=1)

    r = client.post(
        f"/specialties/requirement/{member.id}/{specialty.requirements[0].id}/APPROVED",
        headers=auth_header(owner),
    )
    assert r.status_code == 200

    db.expire_all()
    row = db.scalar(select(UserSpecialty).where(UserSpecialty.user_id == member.id))
    assert row.status == UserSpecialtyStatus.WAITING_APPROVAL


def test_award_notification_failure_keeps_award(client, db, monkeypatch):
    monkeypatch.setattr(notifications, "send", _boom)

    club = create_club(db)
    owner = create_user_in_db(db, role=Role.OWNER, club=club)
    member = create_user_in_db(db, club=club)
    specialty = create_specialty_in_db(db)

    r = client.post(f"/specialties/award/{member.id}/{specialty.id}", headers=auth_header(owner))
    assert r.status_code == 200
    assert r.json()["status"] == "COMPLETED"
    assert get_user(db, member.id).points == 250


def test_failing_specialty_check_does_not_skip_class_check(client, db, monkeypatch):
    monkeypatch.setattr(progress, "check_specialty_completion", _boom)

    club = create_club(db)
    staff = create_user_in_db(db, role=Role.OWNER, club=club)
    member = create_user_in_db(db, club=club)
    requirements = create_class_requirements(db, dbv_class=DbvClass.PIONEIRO, count=4)

    r = client.post(
        f"/specialties/requirement/{member.id}/{requirements[0].id}/APPROVED",
        headers=auth_header(staff),
    )
    assert r.status_code == 200

    db.expire_all()
    row = db.scalar(select(UserRequirement).where(UserRequirement.user_id == member.id))
    assert row.status == RequirementStatus.APPROVED
    assert get_user(db, member.id).points == 100
