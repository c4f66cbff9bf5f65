"""
클럽 대시보드 / 심사 대기 목록 / 내보내기(CSV, XLSX) 테스트.
"""

import csv
import io
from datetime import datetime, timedelta, timezone

from openpyxl import load_workbook

from dbvclub.models.specialty import RequirementStatus, UserSpecialtyStatus
from dbvclub.models.user import Role
from tests.helpers import (
    add_user_requirement,
    add_user_specialty,
    auth_header,
    create_club,
    create_specialty_in_db,
    create_user_in_db,
)


def _parse_csv_text(text: str) -> list[list[str]]:
    text = text.lstrip("\ufeff")
    return list(csv.reader(io.StringIO(text)))


def _club_with_progress(db):
    club = create_club(db)
    owner = create_user_in_db(db, role=Role.OWNER, club=club, name="Carlos")
    ana = create_user_in_db(db, club=club, name="Ana")
    bruno = create_user_in_db(db, club=club, name="Bruno")

    aves = create_specialty_in_db(db, name="Aves", requirement_count=4)
    nos = create_specialty_in_db(db, name="Nós", requirement_count=2)
    create_specialty_in_db(db, name="Sem Atividade", requirement_count=1)

    # Ana: Aves 1/4 승인 + 1 대기 (배정 row 없음)
    add_user_requirement(db, user=ana, requirement=aves.requirements[0], status=RequirementStatus.APPROVED)
    add_user_requirement(db, user=ana, requirement=aves.requirements[1], status=RequirementStatus.PENDING)
    # Bruno: Aves 배정만, Nós 최종 승인 대기
    add_user_specialty(db, user=bruno, specialty=aves)
    add_user_specialty(db, user=bruno, specialty=nos, status=UserSpecialtyStatus.WAITING_APPROVAL)
    for requirement in nos.requirements:
        add_user_requirement(db, user=bruno, requirement=requirement, status=RequirementStatus.APPROVED)

    # 다른 클럽 회원 활동은 집계 제외
    outsider = create_user_in_db(db, club=create_club(db, name="Outro"), name="Zeca")
    add_user_requirement(db, user=outsider, requirement=aves.requirements[2], status=RequirementStatus.PENDING)

    return {"owner": owner, "ana": ana, "bruno": bruno, "aves": aves, "nos": nos, "outsider": outsider}


def test_dashboard_aggregates_member_progress(client, db):
    ctx = _club_with_progress(db)

    r = client.get("/specialties/dashboard", headers=auth_header(ctx["owner"]))
    assert r.status_code == 200, r.text
    body = r.json()

    names = [s["name"] for s in body["specialties"]]
    assert names == ["Aves", "Nós"]

    aves = body["specialties"][0]
    assert aves["total_requirements"] == 4
    members = {m["name"]: m for m in aves["members"]}
    assert set(members) == {"Ana", "Bruno"}
    assert members["Ana"]["progress"] == 25
    assert members["Ana"]["status"] == "IN_PROGRESS"
    assert members["Ana"]["rank"] == "PATHFINDER"
    assert members["Bruno"]["progress"] == 0
    assert members["Bruno"]["status"] == "IN_PROGRESS"

    nos = body["specialties"][1]
    assert nos["members"][0]["name"] == "Bruno"
    assert nos["members"][0]["progress"] == 100
    assert nos["members"][0]["status"] == "WAITING_APPROVAL"

    users = {u["name"]: u for u in body["all_users"]}
    assert set(users) == {"Ana", "Bruno", "Carlos"}
    assert users["Bruno"]["active_specialties_count"] == 2
    assert users["Ana"]["active_specialties_count"] == 1
    assert users["Carlos"]["active_specialties_count"] == 0
    assert users["Carlos"]["role"] == "OWNER"


def test_dashboard_count_includes_completed_and_answered_specialties(client, db):
    club = create_club(db)
    owner = create_user_in_db(db, role=Role.OWNER, club=club)
    member = create_user_in_db(db, club=club, name="Gabi")
    done = create_specialty_in_db(db, name="Aves", requirement_count=1)
    answered = create_specialty_in_db(db, name="Nós", requirement_count=2)
    add_user_specialty(db, user=member, specialty=done, status=UserSpecialtyStatus.COMPLETED)
    add_user_requirement(db, user=member, requirement=done.requirements[0], status=RequirementStatus.APPROVED)
    add_user_requirement(db, user=member, requirement=answered.requirements[0], status=RequirementStatus.PENDING)

    r = client.get("/specialties/dashboard", headers=auth_header(owner))
    assert r.status_code == 200, r.text
    body = r.json()

    users = {u["name"]: u for u in body["all_users"]}
    assert users["Gabi"]["active_specialties_count"] == 2

    listed = {s["name"] for s in body["specialties"] if any(m["name"] == "Gabi" for m in s["members"])}
    assert listed == {"Aves", "Nós"}


def test_dashboard_member_without_progress_is_pending(client, db):
    club = create_club(db)
    owner = create_user_in_db(db, role=Role.OWNER, club=club)
    member = create_user_in_db(db, club=club, name="Davi")
    specialty = create_specialty_in_db(db, requirement_count=2)
    add_user_requirement(db, user=member, requirement=specialty.requirements[0], status=RequirementStatus.REJECTED)

    r = client.get("/specialties/dashboard", headers=auth_header(owner))
    assert r.status_code == 200
    row = r.json()["specialties"][0]["members"][0]
    assert row["progress"] == 0
    assert row["status"] == "PENDING"


def test_dashboard_requires_staff(client, db):
    member = create_user_in_db(db, club=create_club(db))

    r = client.get("/specialties/dashboard", headers=auth_header(member))
    assert r.status_code == 403


def test_dashboard_and_pending_empty_without_club(client, db):
    master = create_user_in_db(db, role=Role.MASTER)

    r = client.get("/specialties/dashboard", headers=auth_header(master))
    assert r.status_code == 200
    assert r.json() == {"specialties": [], "all_users": []}

    r = client.get("/specialties/pending", headers=auth_header(master))
    assert r.status_code == 200
    assert r.json() == {"requirements": [], "specialties": []}


def test_pending_lists_club_work_newest_first(client, db):
    club = create_club(db)
    staff = create_user_in_db(db, role=Role.COUNSELOR, club=club)
    member = create_user_in_db(db, club=club, name="Eva")
    specialty = create_specialty_in_db(db, name="Astronomia", requirement_count=3)
    waiting = create_specialty_in_db(db, name="Cães", requirement_count=1)

    now = datetime.now(timezone.utc)
    older = add_user_requirement(
        db, user=member, requirement=specialty.requirements[0],
        status=RequirementStatus.PENDING, completed_at=now - timedelta(hours=2),
    )
    newer = add_user_requirement(
        db, user=member, requirement=specialty.requirements[1],
        status=RequirementStatus.PENDING, completed_at=now - timedelta(minutes=5),
    )
    add_user_requirement(db, user=member, requirement=specialty.requirements[2], status=RequirementStatus.APPROVED)
    add_user_specialty(db, user=member, specialty=waiting, status=UserSpecialtyStatus.WAITING_APPROVAL)
    add_user_specialty(db, user=member, specialty=specialty, status=UserSpecialtyStatus.IN_PROGRESS)

    outsider = create_user_in_db(db, club=create_club(db, name="Outro"))
    add_user_requirement(db, user=outsider, requirement=specialty.requirements[0], status=RequirementStatus.PENDING)

    r = client.get("/specialties/pending", headers=auth_header(staff))
    assert r.status_code == 200, r.text
    body = r.json()

    assert [item["id"] for item in body["requirements"]] == [str(newer.id), str(older.id)]
    first = body["requirements"][0]
    assert first["user"]["name"] == "Eva"
    assert first["requirement"]["specialty"]["name"] == "Astronomia"

    assert len(body["specialties"]) == 1
    assert body["specialties"][0]["specialty"]["name"] == "Cães"
    assert body["specialties"][0]["status"] == "WAITING_APPROVAL"


def test_dashboard_export_csv(client, db):
    ctx = _club_with_progress(db)

    res = client.get("/specialties/dashboard/export", headers=auth_header(ctx["owner"]))
    assert res.status_code == 200, res.text
    assert res.headers.get("content-type", "").startswith("text/csv")
    assert "attachment" in res.headers.get("content-disposition", "")
    assert res.text.startswith("\ufeff")

    rows = _parse_csv_text(res.text)
    assert rows[0] == ["specialty", "area", "member", "role", "progress", "status"]
    data_rows = rows[1:]
    assert len(data_rows) == 3

    ana = next(r for r in data_rows if r[0] == "Aves" and r[2] == "Ana")
    assert ana[3] == "PATHFINDER"
    assert ana[4] == "25"
    assert ana[5] == "IN_PROGRESS"
    assert all(r[2] != "Zeca" for r in data_rows)


def test_dashboard_export_xlsx(client, db):
    ctx = _club_with_progress(db)

    res = client.get("/specialties/dashboard/export.xlsx", headers=auth_header(ctx["owner"]))
    assert res.status_code == 200
    ct = res.headers.get("content-type", "")
    assert ct.startswith("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")
    assert "attachment" in res.headers.get("content-disposition", "")

    # XLSX는 ZIP 기반 포맷이라 앞부분이 PK로 시작
    assert res.content[:2] == b"PK"

    wb = load_workbook(io.BytesIO(res.content))
    ws = wb.active
    rows = list(ws.iter_rows(values_only=True))
    assert list(rows[0]) == ["specialty", "area", "member", "role", "progress", "status"]
    assert len(rows) == 4


def test_dashboard_export_requires_staff(client, db):
    member = create_user_in_db(db, club=create_club(db))

    assert client.get("/specialties/dashboard/export", headers=auth_header(member)).status_code == 403
    assert client.get("/specialties/dashboard/export.xlsx", headers=auth_header(member)).status_code == 403
