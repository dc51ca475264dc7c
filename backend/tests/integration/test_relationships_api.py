import pytest


@pytest.fixture
def people(client):
    def add(first):
        return client.post("/members", json={"firstName": first, "lastName": "Lee"}).json()["id"]
    return {name: add(name) for name in ("Grace", "Paul", "Cleo", "Cody")}


def link(client, a, b, rel_type, **extra):
    body = {"personAId": a, "personBId": b, "relationshipType": rel_type}
    body.update(extra)
    return client.post("/relationships", json=body)


def test_relationship_types_listing(client):
    types = {t["value"]: t for t in client.get("/relationships/types").json()}
    assert len(types) == 46
    assert types["great_grand_aunt"]["label"] == "Great Grand Aunt"
    assert types["great_grand_aunt"]["inverse"] == "great_grand_niece"
    assert types["parent"]["bidirectional"] is True
    assert types["aunt"]["bidirectional"] is False


def test_create_relationship_with_inverse(client, people):
    r = link(client, people["Paul"], people["Cleo"], "parent", notes="adopted 2010")
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["label"] == "Parent"
    assert body["notes"] == "adopted 2010"

    listed = client.get("/relationships", params={"memberId": people["Cleo"]}).json()
    assert {(x["personAId"], x["relationshipType"]) for x in listed} == {
        (people["Paul"], "parent"),
        (people["Cleo"], "child"),
    }


def test_invalid_relationships(client, people):
    r = link(client, people["Paul"], people["Paul"], "sibling")
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "RELATIONSHIP_INVALID"

    assert link(client, people["Paul"], people["Cleo"], "parent").status_code == 201
    assert link(client, people["Paul"], people["Cleo"], "parent").status_code == 400
    assert link(client, people["Cleo"], people["Paul"], "parent").status_code == 400

    assert link(client, people["Paul"], people["Cleo"], "frenemy").status_code == 422


def test_validate_endpoint(client, people):
    link(client, people["Grace"], people["Paul"], "parent")
    link(client, people["Paul"], people["Cleo"], "parent")

    ok = client.post("/relationships/validate", json={"personAId": people["Cleo"], "personBId": people["Cody"], "relationshipType": "sibling"})
    assert ok.json() == {"valid": True, "error": None, "warnings": []}

    cycle = client.post("/relationships/validate", json={"personAId": people["Cleo"], "personBId": people["Grace"], "relationshipType": "parent"})
    assert cycle.json()["valid"] is False


def test_members_from_other_group_cannot_be_linked(client, people, real_headers):
    real_id = client.post("/members", json={"firstName": "Rae", "lastName": "Real"}, headers=real_headers).json()["id"]
    r = link(client, people["Paul"], real_id, "cousin")
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "MEMBER_NOT_FOUND"


def test_suggestions(client, people):
    link(client, people["Paul"], people["Cleo"], "parent")
    link(client, people["Paul"], people["Cody"], "parent")

    r = client.get("/relationships/suggestions", params={"personAId": people["Cleo"], "personBId": people["Cody"]})
    assert r.status_code == 200
    assert r.json()[0]["relationshipType"] == "sibling"
    assert r.json()[0]["confidence"] == 0.9


def test_family_tree(client, people):
    link(client, people["Grace"], people["Paul"], "parent")
    link(client, people["Paul"], people["Cleo"], "parent")

    tree = client.get(f"/relationships/tree/{people['Paul']}").json()
    assert [p["firstName"] for p in tree["parents"]] == ["Grace"]
    assert [c["firstName"] for c in tree["children"]] == ["Cleo"]

    assert client.get("/relationships/tree/nobody").status_code == 404


def test_delete_relationship(client, people, real_headers):
    rel = link(client, people["Paul"], people["Cleo"], "parent").json()

    # invisible to the other family group
    assert client.delete(f"/relationships/{rel['id']}", headers=real_headers).status_code == 404

    assert client.delete(f"/relationships/{rel['id']}").status_code == 204
    r = client.delete(f"/relationships/{rel['id']}")
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "RELATIONSHIP_NOT_FOUND"
    # the inverse edge stays
    assert len(client.get("/relationships").json()) == 1
