from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient

import jobboard_scraper.main as cli
from jobboard_scraper.app import create_app
from jobboard_scraper.utils.file_storage import SnapshotFileManager
from jobboard_scraper.utils.heartbeat import get_heartbeat


@pytest.fixture
def client(store, tmp_path):
    with TestClient(create_app(store_factory=lambda: store, snapshot_dir=str(tmp_path))) as test_client:
        yield test_client


INGEST_BODY = {
    "source": "indeed",
    "role": "Developer",
    "entries": [
        {
            "listing": {
                "title": "Software Developer",
                "link": "https://x.test/viewjob?jk=abc123",
                "company": "Acme",
                "location": "Lahore",
            }
        },
        {"listing": {"title": "", "link": "https://x.test/viewjob?jk=empty"}},
    ],
}


def test_health_reports_store_counts(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert body["database"] == "connected"
    assert body["total_jobs"] == 0
    assert body["app_version"]["major"] == 1


def test_root_lists_endpoints(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "POST /jobs/ingest" in response.json()["endpoints"]


def test_ingest_saves_then_skips(client):
    first = client.post("/jobs/ingest", json=INGEST_BODY)
    second = client.post("/jobs/ingest", json=INGEST_BODY)

    assert first.status_code == 200
    assert first.json()["saved_job_ids"] == ["indeed-abc123"]
    assert first.json()["summary"]["dropped"] == 1
    assert second.json()["saved_job_ids"] == []
    assert second.json()["summary"]["skipped"] == 1


def test_ingest_leaves_a_snapshot_the_cli_can_replay(client, collection, store, tmp_path, monkeypatch, capsys):
    response = client.post("/jobs/ingest", json=INGEST_BODY)
    extra = {"listing": {"title": "QA Engineer", "link": "https://x.test/viewjob?jk=qa1"}}
    client.post("/jobs/ingest", json={**INGEST_BODY, "entries": [INGEST_BODY["entries"][0], extra]})

    entries = SnapshotFileManager(str(tmp_path)).load_entries("indeed", "Developer")
    assert response.json()["snapshot_file"] == str(tmp_path / "indeed" / "Developer.json")
    assert [entry["listing"]["title"] for entry in entries] == ["Software Developer", "", "QA Engineer"]

    @contextmanager
    def open_store(app_settings=None):
        yield store

    collection.documents.clear()
    monkeypatch.setattr(cli, "connect_job_store", open_store)
    monkeypatch.setattr(cli.settings, "JOB_SCRAPER_RESULTS_PER_ROLE", 5)

    argv = ["scrape", "--platform", "indeed", "--roles", "Developer", "--snapshot-dir", str(tmp_path)]
    assert cli.main(argv) == 0
    assert "2 new jobs saved from Indeed.com" in capsys.readouterr().out
    assert store.get_job("indeed-qa1") is not None


def test_ingest_rejects_unknown_source(client):
    response = client.post("/jobs/ingest", json={**INGEST_BODY, "source": "monster"})

    assert response.status_code == 422


def test_get_job_and_unpublished_listing(client):
    client.post("/jobs/ingest", json=INGEST_BODY)

    job = client.get("/jobs/indeed-abc123")
    unpublished = client.get("/jobs/unpublished")
    stats = client.get("/jobs/stats")

    assert job.status_code == 200
    assert job.json()["jobId"] == "indeed-abc123"
    assert job.json()["companyName"] == "Acme"
    assert unpublished.json()["total_count"] == 1
    assert unpublished.json()["jobs"][0]["jobRole"] == "Software Developer"
    assert stats.json()["total_jobs"] == 1
    assert stats.json()["unpublished_jobs"] == 1


def test_unknown_job_is_404(client):
    assert client.get("/jobs/indeed-missing").status_code == 404


@pytest.mark.asyncio
async def test_heartbeat_degrades_when_store_errors():
    class BrokenStore:
        def ping(self):
            return True

        def count_jobs(self, filters=None):
            raise RuntimeError("cursor killed")

    heartbeat = await get_heartbeat(BrokenStore())

    assert heartbeat.status == "DEGRADED"
    assert heartbeat.database == "unreachable"
