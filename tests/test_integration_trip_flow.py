"""
Trip lifecycle pages end to end: start -> complete -> rate, cancellation,
and the guards around them.
"""

from conftest import HOST, RENTER, make_trip

from carshare_web.services.submissions import IN_FLIGHT


def test_start_trip_flow(client, fake_api, login_as):
    login_as(RENTER)
    fake_api.trips["t1"] = make_trip("t1", "PENDING")

    r = client.get("/trip/t1/start")
    assert r.status_code == 200
    assert 'name="startOdometerReading"' in r.get_data(as_text=True)

    r = client.post("/trip/t1/start", data={"startOdometerReading": "12500", "notes": "ok"})
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/dashboard")
    _, trip_id, payload = fake_api.called("start_trip")[0]
    assert trip_id == "t1"
    assert payload["startOdometerReading"] == 12500
    assert fake_api.trips["t1"]["status"] == "IN_PROGRESS"


def test_start_trip_invalid_reading_rerenders(client, fake_api, login_as):
    login_as(RENTER)
    fake_api.trips["t1"] = make_trip("t1", "PENDING")

    r = client.post("/trip/t1/start", data={"startOdometerReading": "-3", "notes": "keep me"})
    assert r.status_code == 400
    body = r.get_data(as_text=True)
    assert "Starting odometer reading must be" in body
    assert "keep me" in body
    assert not fake_api.called("start_trip")


def test_host_is_bounced_from_start(client, fake_api, login_as):
    login_as(HOST)
    fake_api.trips["t1"] = make_trip("t1", "PENDING")

    r = client.get("/trip/t1/start", follow_redirects=True)
    assert "Only renters can start a trip." in r.get_data(as_text=True)


def test_complete_below_start_reading_keeps_form(client, fake_api, login_as):
    login_as(RENTER)
    fake_api.trips["t1"] = make_trip("t1", "IN_PROGRESS", startOdometerReading=12500)

    r = client.post("/trip/t1/complete", data={"endOdometerReading": "12400", "fuelLevel": "0.5"})
    assert r.status_code == 400
    body = r.get_data(as_text=True)
    assert "starting reading (12,500 km)" in body
    assert 'value="12400"' in body
    assert not fake_api.called("complete_trip")


def test_complete_trip_flow(client, fake_api, login_as):
    login_as(RENTER)
    fake_api.trips["t1"] = make_trip("t1", "IN_PROGRESS", startOdometerReading=12500)

    r = client.get("/trip/t1/complete")
    assert r.status_code == 200
    assert "12,500 km" in r.get_data(as_text=True)

    r = client.post("/trip/t1/complete", data={
        "endOdometerReading": "12650", "fuelLevel": "0.75", "requiresCleaning": "on",
    })
    assert r.status_code == 302
    payload = fake_api.called("complete_trip")[0][2]
    assert payload["endOdometerReading"] == 12650
    assert payload["fuelLevel"] == 0.75
    assert payload["requiresCleaning"] is True


def test_cancel_flow_appends_notes(client, fake_api, login_as):
    login_as(RENTER)
    fake_api.trips["t1"] = make_trip("t1", "PENDING")

    r = client.get("/trip/t1/cancel")
    assert r.status_code == 200
    assert "security deposit is always refunded" in r.get_data(as_text=True)

    r = client.post("/trip/t1/cancel", data={"reason": "Change of plans", "additionalNotes": "next week"})
    assert r.status_code == 302
    assert fake_api.called("cancel_trip")[0][2] == {"reason": "Change of plans\nNotes: next week"}


def test_cancel_without_reason(client, fake_api, login_as):
    login_as(RENTER)
    fake_api.trips["t1"] = make_trip("t1", "PENDING")
    r = client.post("/trip/t1/cancel", data={"additionalNotes": "hmm"})
    assert r.status_code == 400
    assert "Please select a reason for cancellation." in r.get_data(as_text=True)


def test_cancel_not_offered_once_started(client, fake_api, login_as):
    login_as(RENTER)
    fake_api.trips["t1"] = make_trip("t1", "IN_PROGRESS")
    r = client.post("/trip/t1/cancel", data={"reason": "Other"}, follow_redirects=True)
    assert "cannot be cancelled" in r.get_data(as_text=True)
    assert not fake_api.called("cancel_trip")


def test_rating_flow_for_renter(client, fake_api, login_as):
    login_as(RENTER)
    fake_api.trips["t1"] = make_trip("t1", "COMPLETED")

    r = client.post("/trip/t1/rating", data={"rating": "5", "comments": "Smooth ride"})
    assert r.status_code == 302
    assert fake_api.called("submit_rating")[0][2] == {"renterRating": 5, "renterComments": "Smooth ride"}

    r = client.get("/trip/t1/rating")
    assert "Your rating: 5" in r.get_data(as_text=True)


def test_rating_out_of_range(client, fake_api, login_as):
    login_as(HOST)
    fake_api.trips["t1"] = make_trip("t1", "COMPLETED")
    r = client.post("/trip/t1/rating", data={"rating": "9"})
    assert r.status_code == 400
    assert "Rating must be between 1 and 5 stars." in r.get_data(as_text=True)


def test_missing_trip(client, fake_api, login_as):
    login_as(RENTER)
    r = client.get("/trip/nope/start", follow_redirects=True)
    assert "Trip not found" in r.get_data(as_text=True)


def test_duplicate_submission_is_rejected(client, fake_api, login_as):
    login_as(RENTER)
    fake_api.trips["t1"] = make_trip("t1", "PENDING")

    with IN_FLIGHT.guard(RENTER["userId"], "start:t1"):
        r = client.post("/trip/t1/start", data={"startOdometerReading": "100"})
    assert r.status_code == 400
    assert "already being submitted" in r.get_data(as_text=True)
    assert not fake_api.called("start_trip")


def test_start_button_shows_busy_label_while_submission_runs(client, fake_api, login_as):
    login_as(RENTER)
    fake_api.trips["t1"] = make_trip("t1", "PENDING")

    with IN_FLIGHT.guard(RENTER["userId"], "start:t1"):
        body = client.get("/trip/t1/start").get_data(as_text=True)
    assert '<button type="submit" disabled aria-busy="true">Starting...</button>' in body

    body = client.get("/trip/t1/start").get_data(as_text=True)
    assert '<button type="submit">Start Trip</button>' in body
    assert "disabled" not in body


def test_dashboard_lists_actions(client, fake_api, login_as):
    login_as(RENTER)
    fake_api.trips["t1"] = make_trip("t1", "PENDING", startOdometerReading=None)
    fake_api.trips["t2"] = make_trip("t2", "COMPLETED", dateOfBookingEpoch=1, renterRating=4)

    body = client.get("/dashboard").get_data(as_text=True)
    assert "/trip/t1/start" in body
    assert "/trip/t1/cancel" in body
    assert "View Rating" in body
    assert "Marina Bay Sands" in body
    assert "SGD $45.50" in body


def test_dashboard_active_panel_links_to_next_step(client, fake_api, login_as):
    login_as(RENTER)
    fake_api.trips["t3"] = make_trip("t3", "IN_PROGRESS", dateOfBookingEpoch=5)
    fake_api.trips["t4"] = make_trip("t4", "COMPLETED", dateOfBookingEpoch=1)

    body = client.get("/dashboard").get_data(as_text=True)
    panel = body.split('<section class="active-trip">')[1].split("</section>")[0]
    assert "Trip t3" in panel
    assert 'href="/trip/t3/complete"' in panel
    assert "/trip/t4" not in panel
