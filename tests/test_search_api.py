"""Tests for the cross-entity search route."""

from fastapi.testclient import TestClient


def add_item(client: TestClient, list_id: str, text: str) -> dict:
    response = client.post(f"/api/todolists/{list_id}/items", json={"text": text})
    assert response.status_code == 201
    return response.json()


class TestSearch:
    def test_query_required(self, client: TestClient):
        response = client.get("/api/search")
        assert response.status_code == 400
        assert response.json() == {"error": "Search query is required"}

        response = client.get("/api/search", params={"q": ""})
        assert response.status_code == 400

    def test_unknown_type_rejected(self, client: TestClient):
        response = client.get("/api/search", params={"q": "milk", "type": "notes"})
        assert response.status_code == 400

    def test_finds_list_by_item_text(self, client: TestClient, sample_list: dict):
        add_item(client, sample_list["_id"], "Buy milk")

        response = client.get("/api/search", params={"q": "milk"})
        assert response.status_code == 200
        results = response.json()
        assert [todo_list["_id"] for todo_list in results["todoLists"]] == [sample_list["_id"]]
        assert results["events"] == []

    def test_archived_lists_excluded(self, client: TestClient, sample_list: dict):
        add_item(client, sample_list["_id"], "Buy milk")
        client.delete(f"/api/todolists/{sample_list['_id']}")

        results = client.get("/api/search", params={"q": "milk"}).json()
        assert results["todoLists"] == []

    def test_case_insensitive(self, client: TestClient, sample_event: dict, sample_list: dict):
        results = client.get("/api/search", params={"q": "GROCER"}).json()
        assert [todo_list["_id"] for todo_list in results["todoLists"]] == [sample_list["_id"]]

        results = client.get("/api/search", params={"q": "team sync"}).json()
        assert [event["_id"] for event in results["events"]] == [sample_event["_id"]]

    def test_event_fields_matched(self, client: TestClient, sample_event: dict):
        for query in ("Sync", "planning", "4b"):
            results = client.get("/api/search", params={"q": query, "type": "events"}).json()
            assert [event["_id"] for event in results["events"]] == [sample_event["_id"]]

    def test_cancelled_events_excluded(self, client: TestClient, sample_event: dict):
        client.delete(f"/api/events/{sample_event['_id']}")
        results = client.get("/api/search", params={"q": "Sync"}).json()
        assert results["events"] == []

    def test_type_selects_keys(self, client: TestClient, sample_event: dict):
        events_only = client.get("/api/search", params={"q": "Sync", "type": "events"}).json()
        assert set(events_only) == {"events"}

        lists_only = client.get("/api/search", params={"q": "Sync", "type": "todolists"}).json()
        assert set(lists_only) == {"todoLists"}

        both = client.get("/api/search", params={"q": "Sync"}).json()
        assert set(both) == {"events", "todoLists"}

    def test_event_results_include_todo_lists(self, client: TestClient, sample_event: dict, sample_list: dict):
        client.post(f"/api/events/{sample_event['_id']}/assign-list/{sample_list['_id']}")
        results = client.get("/api/search", params={"q": "Sync", "type": "events"}).json()
        assert results["events"][0]["todoLists"][0]["title"] == "Groceries"

    def test_pattern_characters_are_literal(self, client: TestClient, sample_event: dict, sample_list: dict):
        results = client.get("/api/search", params={"q": ".*"}).json()
        assert results == {"events": [], "todoLists": []}

        response = client.get("/api/search", params={"q": "(unclosed["})
        assert response.status_code == 200

    def test_literal_special_characters_match(self, client: TestClient, sample_list: dict):
        add_item(client, sample_list["_id"], "Eggs (12)")
        results = client.get("/api/search", params={"q": "(12)"}).json()
        assert [todo_list["_id"] for todo_list in results["todoLists"]] == [sample_list["_id"]]
