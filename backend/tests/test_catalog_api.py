def create_course(client, code, prerequisites=None, title=None, headers=None):
    response = client.post(
        "/api/courses/",
        json={
            "code": code,
            "title": title or f"{code} title",
            "description": "",
            "credits": 3,
            "prerequisites": prerequisites or [],
        },
        headers=headers or {},
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_course_crud(client):
    created = create_course(client, "CS101", title="Programming Fundamentals")
    assert created["code"] == "CS101"
    assert created["prerequisites"] == []

    duplicate = client.post("/api/courses/", json={"code": "CS101", "title": "Again"})
    assert duplicate.status_code == 409

    updated = client.put(
        f"/api/courses/{created['id']}",
        json={"title": "Intro to Programming", "prerequisites": ["MATH100"]},
    )
    assert updated.status_code == 200
    assert updated.json()["title"] == "Intro to Programming"
    assert updated.json()["prerequisites"] == ["MATH100"]

    listing = client.get("/api/courses/")
    assert [item["code"] for item in listing.json()] == ["CS101"]

    deleted = client.delete(f"/api/courses/{created['id']}")
    assert deleted.json() == {"success": True}
    missing = client.get(f"/api/courses/{created['id']}")
    assert missing.status_code == 404
    assert "not found" in missing.json()["message"]


def test_blank_prerequisite_code_rejected(client):
    response = client.post("/api/courses/", json={"code": "CS102", "title": "T", "prerequisites": ["  "]})
    assert response.status_code == 422


def test_version_lifecycle(client):
    course = create_course(client, "CS201")
    base = f"/api/courses/{course['id']}/versions"

    no_active = client.get(f"{base}/active")
    assert no_active.status_code == 404

    first = client.post(
        base,
        json={"title": "Data Structures", "credits": 3, "prerequisites": ["CS101"], "is_active": False},
        headers={"X-Actor-Id": "registrar-1"},
    )
    assert first.status_code == 201
    second = client.post(base, json={"title": "Data Structures II", "credits": 4})
    assert second.status_code == 201

    versions = client.get(base).json()
    assert [item["version"] for item in versions] == [1, 2]
    assert [item["is_active"] for item in versions] == [False, True]

    active = client.get(f"{base}/active").json()
    assert active["id"] == second.json()["id"]
    assert active["credits"] == 4

    archived = client.post(f"/api/course-versions/{active['id']}/archive")
    assert archived.json() == {"id": active["id"], "archived": True, "changed": True}
    again = client.post(f"/api/course-versions/{active['id']}/archive")
    assert again.json()["changed"] is False
    assert client.get(f"{base}/active").status_code == 404


def test_version_for_unknown_course_is_404(client):
    response = client.post("/api/courses/nope/versions", json={"title": "X", "credits": 3})
    assert response.status_code == 404
    assert response.json()["details"]["resource_type"] == "Course"

    assert client.post("/api/course-versions/nope/archive").status_code == 404
    assert client.get("/api/courses/nope/versions").json() == []


def test_prerequisite_graph_and_validation(client):
    create_course(client, "MATH101")
    create_course(client, "MATH201", ["MATH101"])
    math301 = create_course(client, "MATH301", ["MATH201", "MATH101"])

    graph = client.get(f"/api/courses/{math301['id']}/prerequisites/graph")
    assert graph.status_code == 200
    assert graph.json() == {
        "course_id": math301["id"],
        "start_code": "MATH301",
        "adjacency": {
            "MATH301": ["MATH201", "MATH101"],
            "MATH201": ["MATH101"],
            "MATH101": [],
        },
    }

    validation = client.get(f"/api/courses/{math301['id']}/prerequisites/validation")
    assert validation.json() == {"valid": True, "cycle": None, "reason": None}


def test_validation_reports_cycle_and_depth(client):
    a = create_course(client, "A", ["B"])
    create_course(client, "B", ["C"])
    create_course(client, "C", ["A"])

    cycle = client.get(f"/api/courses/{a['id']}/prerequisites/validation").json()
    assert cycle == {"valid": False, "cycle": ["A", "B", "C", "A"], "reason": None}

    shallow = client.get(f"/api/courses/{a['id']}/prerequisites/validation", params={"max_depth": 1}).json()
    assert shallow["valid"] is False
    assert shallow["reason"] == "Exceeded max depth (1) starting from A"

    out_of_range = client.get(f"/api/courses/{a['id']}/prerequisites/validation", params={"max_depth": 0})
    assert out_of_range.status_code == 422


def test_dependents_endpoint(client):
    cs201 = create_course(client, "CS201")
    create_course(client, "CS310", ["cs201 "], title="Operating Systems")

    response = client.get(f"/api/courses/{cs201['id']}/dependents", params={"code": "CS201"})
    assert response.status_code == 200
    [dependent] = response.json()
    assert dependent["code"] == "CS310"
    assert dependent["title"] == "Operating Systems"
    assert dependent["matched"] == ["cs201 "]

    assert client.get("/api/courses/missing/dependents").status_code == 404


def test_update_rejects_explicit_null_and_keeps_course(client):
    course = create_course(client, "CS101", title="T")

    for field in ("description", "title", "credits", "prerequisites", "code"):
        response = client.put(f"/api/courses/{course['id']}", json={field: None})
        assert response.status_code == 422, field

    unchanged = client.get(f"/api/courses/{course['id']}").json()
    assert unchanged["title"] == "T"
    assert unchanged["description"] == ""
    assert unchanged["credits"] == 3

    # The session stays usable after rejected updates.
    updated = client.put(f"/api/courses/{course['id']}", json={"description": "Intro"})
    assert updated.status_code == 200
    assert updated.json()["description"] == "Intro"


def test_list_courses_ordered_by_code(client):
    for code in ("MATH201", "CS101", "BIO110"):
        create_course(client, code)

    listing = client.get("/api/courses/")

    assert [item["code"] for item in listing.json()] == ["BIO110", "CS101", "MATH201"]
