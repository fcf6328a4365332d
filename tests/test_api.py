import pytest

TUESDAY = "2024-06-04"
WEDNESDAY = "2024-06-05"
MONDAY = "2024-06-03"


@pytest.fixture
def manager(login):
    return login("manager")


@pytest.fixture
def setup(client, manager):
    """A client, a stylist working Tuesdays 09:00-17:00 and a 30-minute trim."""
    customer = client.post("/clients", json={"name": "Ada Lovelace", "email": "ada@example.com"}, headers=manager)
    stylist = client.post(
        "/staff",
        json={
            "name": "Sam",
            "role": "stylist",
            "schedule": {"mon": "off", "tue": ["09:00", "17:00"], "wed": ["12:00", "20:00"]},
        },
        headers=manager,
    )
    trim = client.post(
        "/services",
        json={"name": "Trim", "category": "Hair", "price": 30, "duration": 30},
        headers=manager,
    )
    assert customer.status_code == stylist.status_code == trim.status_code == 201
    return {"client": customer.json(), "stylist": stylist.json(), "trim": trim.json()}


def book(client, headers, setup, start, day=TUESDAY, **params):
    return client.post(
        "/appointments",
        params=params,
        json={
            "client_id": setup["client"]["id"],
            "staff_id": setup["stylist"]["id"],
            "service_id": setup["trim"]["id"],
            "date": day,
            "start_time": start,
        },
        headers=headers,
    )


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_login_and_me(client, login):
    headers = login("receptionist", email="desk@salon.test")
    resp = client.get("/me", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["email"] == "desk@salon.test"
    assert resp.json()["role"] == "receptionist"


def test_duplicate_user(client, login):
    login("manager", email="boss@salon.test")
    resp = client.post("/users", json={"email": "boss@salon.test", "password": "another-pass", "role": "stylist"})
    assert resp.status_code == 409


def test_bad_credentials(client, login):
    login("manager", email="boss@salon.test")
    resp = client.post("/auth/login", data={"username": "boss@salon.test", "password": "wrong-password"})
    assert resp.status_code == 401


def test_requires_token(client):
    assert client.get("/clients").status_code == 401
    assert client.get("/clients", headers={"Authorization": "Bearer not-a-token"}).status_code == 401


def test_stylist_cannot_manage_clients(client, login):
    stylist = login("stylist")
    resp = client.post("/clients", json={"name": "Grace"}, headers=stylist)
    assert resp.status_code == 403


def test_staff_schedule_is_normalized(client, setup):
    schedule = setup["stylist"]["schedule"]
    assert schedule["monday"] == "off"
    assert schedule["tuesday"] == ["09:00", "17:00"]
    assert schedule["sunday"] == "off"


def test_invalid_schedule(client, manager, setup):
    resp = client.put(
        f"/staff/{setup['stylist']['id']}/schedule",
        json={"tuesday": ["17:00", "09:00"]},
        headers=manager,
    )
    assert resp.status_code == 422
    assert resp.json()["error"] == "validation_error"


def test_replace_schedule(client, manager, setup):
    resp = client.put(
        f"/staff/{setup['stylist']['id']}/schedule",
        json={"saturday": ["10:00", "14:00"]},
        headers=manager,
    )
    assert resp.status_code == 200
    assert resp.json()["schedule"]["saturday"] == ["10:00", "14:00"]
    assert resp.json()["schedule"]["tuesday"] == "off"


def test_service_validation(client, manager):
    resp = client.post("/services", json={"name": "Free", "category": "Hair", "price": -1, "duration": 30}, headers=manager)
    assert resp.status_code == 422
    resp = client.post("/services", json={"name": "Instant", "category": "Hair", "price": 10, "duration": 0}, headers=manager)
    assert resp.status_code == 422


def test_booking_flow(client, manager, setup):
    resp = book(client, manager, setup, "09:00")
    assert resp.status_code == 201, resp.text
    first = resp.json()
    assert first["end_time"] == "09:30:00"
    assert first["status"] == "pending"

    resp = book(client, manager, setup, "09:15")
    assert resp.status_code == 409
    assert resp.json()["error"] == "scheduling_conflict"

    resp = book(client, manager, setup, "09:30")
    assert resp.status_code == 201


def test_booking_outside_hours_and_unknown_service(client, manager, setup):
    resp = book(client, manager, setup, "09:00", day=MONDAY)
    assert resp.status_code == 422
    assert resp.json()["error"] == "validation_error"

    resp = client.post(
        "/appointments",
        json={
            "client_id": setup["client"]["id"],
            "staff_id": setup["stylist"]["id"],
            "service_id": 999,
            "date": TUESDAY,
            "start_time": "10:00",
        },
        headers=manager,
    )
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


def test_double_booking_override(client, login, manager, setup):
    receptionist = login("receptionist")
    assert book(client, receptionist, setup, "09:00").status_code == 201

    resp = book(client, receptionist, setup, "09:15", allow_overlap=True)
    assert resp.status_code == 409

    resp = book(client, manager, setup, "09:15", allow_overlap=True)
    assert resp.status_code == 201

    # a group booking at the very same start goes through with the override
    resp = book(client, manager, setup, "09:00", allow_overlap=True)
    assert resp.status_code == 201, resp.text

    resp = client.get("/appointments", params={"start": TUESDAY, "end": TUESDAY}, headers=manager)
    assert [a["start_time"] for a in resp.json()] == ["09:00:00", "09:00:00", "09:15:00"]

    # without the override the same start is still refused
    resp = book(client, manager, setup, "09:00")
    assert resp.status_code == 409
    assert resp.json()["error"] == "scheduling_conflict"


def test_status_transitions(client, manager, setup):
    appt_id = book(client, manager, setup, "10:00").json()["id"]

    resp = client.post(f"/appointments/{appt_id}/status", json={"status": "confirmed"}, headers=manager)
    assert resp.status_code == 200
    assert resp.json()["status"] == "confirmed"

    resp = client.post(f"/appointments/{appt_id}/status", json={"status": "completed"}, headers=manager)
    assert resp.status_code == 200

    resp = client.post(f"/appointments/{appt_id}/status", json={"status": "pending"}, headers=manager)
    assert resp.status_code == 409
    assert resp.json()["error"] == "invalid_status_transition"


def test_cancel_frees_the_slot(client, manager, setup):
    appt_id = book(client, manager, setup, "10:00").json()["id"]
    resp = client.patch(f"/appointments/{appt_id}/cancel", headers=manager)
    assert resp.status_code == 200
    assert resp.json()["status"] == "cancelled"

    assert book(client, manager, setup, "10:00").status_code == 201


def test_reschedule(client, manager, setup):
    appt_id = book(client, manager, setup, "10:00").json()["id"]
    book(client, manager, setup, "11:00")

    resp = client.patch(f"/appointments/{appt_id}", json={"start_time": "13:00"}, headers=manager)
    assert resp.status_code == 200
    assert resp.json()["end_time"] == "13:30:00"

    resp = client.patch(f"/appointments/{appt_id}", json={"start_time": "11:15"}, headers=manager)
    assert resp.status_code == 409


def test_get_and_delete_appointment(client, manager, setup):
    appt_id = book(client, manager, setup, "10:00").json()["id"]
    assert client.get(f"/appointments/{appt_id}", headers=manager).status_code == 200

    assert client.delete(f"/appointments/{appt_id}", headers=manager).status_code == 204

    resp = client.get(f"/appointments/{appt_id}", headers=manager)
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"
    assert client.delete(f"/appointments/{appt_id}", headers=manager).status_code == 404


def test_list_appointments(client, manager, setup):
    book(client, manager, setup, "11:00")
    book(client, manager, setup, "09:00")
    book(client, manager, setup, "12:00", day=WEDNESDAY)

    resp = client.get("/appointments", params={"start": TUESDAY, "end": TUESDAY}, headers=manager)
    assert resp.status_code == 200
    assert [a["start_time"] for a in resp.json()] == ["09:00:00", "11:00:00"]

    resp = client.get("/appointments", params={"client_id": setup["client"]["id"]}, headers=manager)
    assert len(resp.json()) == 3

    resp = client.get("/appointments", params={"start": WEDNESDAY, "end": TUESDAY}, headers=manager)
    assert resp.status_code == 422


def test_week_view(client, manager, setup):
    book(client, manager, setup, "11:00")
    book(client, manager, setup, "09:00")
    book(client, manager, setup, "12:00", day=WEDNESDAY)

    resp = client.get("/appointments/week", params={"date": WEDNESDAY}, headers=manager)
    assert resp.status_code == 200
    body = resp.json()
    assert body["week_start"] == MONDAY
    assert sorted(body["days"], key=int) == ["1", "2", "3", "4", "5", "6", "7"]
    assert [a["start_time"] for a in body["days"]["2"]] == ["09:00:00", "11:00:00"]
    assert len(body["days"]["3"]) == 1


def test_available_staff(client, manager, setup):
    resp = client.get("/staff/available", params={"date": TUESDAY, "time": "10:00"})
    assert resp.status_code == 200
    assert [m["id"] for m in resp.json()] == [setup["stylist"]["id"]]

    resp = client.get("/staff/available", params={"date": MONDAY, "time": "10:00"})
    assert resp.json() == []

    book(client, manager, setup, "10:00")
    resp = client.get("/staff/available", params={"date": TUESDAY, "time": "10:15"})
    assert resp.json() == []


def test_open_slots(client, manager, setup):
    book(client, manager, setup, "09:00")
    resp = client.get(
        f"/staff/{setup['stylist']['id']}/availability",
        params={"date": TUESDAY, "service_id": setup["trim"]["id"]},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["available_starts"][0] == "09:30"
    assert body["available_starts"][-1] == "16:30"


def test_client_search_and_history(client, manager, setup):
    client.post("/clients", json={"name": "Grace Hopper", "phone": "555-0199"}, headers=manager)

    resp = client.get("/clients", params={"q": "ada"}, headers=manager)
    assert [c["name"] for c in resp.json()] == ["Ada Lovelace"]

    resp = client.get("/clients", params={"q": "0199"}, headers=manager)
    assert [c["name"] for c in resp.json()] == ["Grace Hopper"]

    book(client, manager, setup, "09:00")
    resp = client.get(f"/clients/{setup['client']['id']}/appointments", headers=manager)
    assert len(resp.json()) == 1


def test_update_and_delete_client(client, manager, setup):
    client_id = setup["client"]["id"]
    resp = client.patch(f"/clients/{client_id}", json={"preferences": "Unscented products"}, headers=manager)
    assert resp.status_code == 200
    assert resp.json()["preferences"] == "Unscented products"
    assert resp.json()["name"] == "Ada Lovelace"

    assert client.delete(f"/clients/{client_id}", headers=manager).status_code == 204
    assert client.get(f"/clients/{client_id}", headers=manager).status_code == 404


def test_reports(client, manager, setup):
    appt_id = book(client, manager, setup, "09:00").json()["id"]
    book(client, manager, setup, "10:00")
    client.post(f"/appointments/{appt_id}/status", json={"status": "confirmed"}, headers=manager)
    client.post(f"/appointments/{appt_id}/status", json={"status": "completed"}, headers=manager)

    resp = client.get("/reports/summary", params={"year": 2024}, headers=manager)
    assert resp.status_code == 200
    summary = resp.json()
    assert summary["revenue"] == 30.0
    assert summary["average_ticket"] == 30.0
    assert summary["status_counts"]["completed"] == 1
    assert summary["status_counts"]["pending"] == 1
    assert summary["service_popularity"] == [{"service_id": setup["trim"]["id"], "name": "Trim", "count": 2}]
    assert summary["monthly_revenue"][5] == 30.0

    resp = client.get("/reports/dashboard", params={"on": TUESDAY}, headers=manager)
    dashboard = resp.json()
    assert dashboard["todays_revenue"] == 30.0
    assert dashboard["active_clients"] == 1
    assert dashboard["pending_appointments"] == 1
    assert len(dashboard["todays_appointments"]) == 2


def test_reports_are_for_the_front_desk(client, login):
    stylist = login("stylist")
    assert client.get("/reports/summary", headers=stylist).status_code == 403


def test_startup_configures_logging_and_tables(monkeypatch):
    from fastapi.testclient import TestClient

    from salon import main

    calls = []
    monkeypatch.setattr(main, "create_tables", lambda: calls.append("tables"))
    monkeypatch.setattr(main, "setup_logging", lambda: calls.append("logging"))

    with TestClient(main.app) as test_client:
        assert test_client.get("/health").status_code == 200
    assert calls == ["logging", "tables"]
