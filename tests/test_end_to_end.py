from __future__ import annotations


def test_employer_posts_job_worker_sees_it_but_cannot_edit(client, register) -> None:
    employer, _ = register("mario@example.com", "employer")

    business = client.post(
        "/businesses",
        json={
            "name": "Mario's Pizza",
            "type": "Restaurant",
            "address": {
                "street": "12 Elm St",
                "city": "Columbus",
                "county": "Franklin",
                "state": "OH",
                "zipcode": "43004",
            },
        },
        headers=employer,
    )
    assert business.status_code == 201

    job = client.post("/jobs", json={"title": "Server", "hourly_rate": 18}, headers=employer)
    assert job.status_code == 201
    job_id = job.json()["id"]

    worker, _ = register("luigi@example.com", "worker")
    listed = client.get("/jobs", headers=worker)
    assert listed.status_code == 200
    match = [j for j in listed.json() if j["id"] == job_id]
    assert len(match) == 1
    assert match[0]["status"] == "active"
    assert match[0]["hourly_rate"] == 18

    r = client.put(f"/jobs/{job_id}", json={"title": "Free pizza"}, headers=worker)
    assert r.status_code == 403
