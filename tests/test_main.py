from contextlib import contextmanager

import jobboard_scraper.main as cli
from jobboard_scraper.models.errors import StoreUnavailableError
from jobboard_scraper.utils.file_storage import SnapshotFileManager


def test_platform_selection_accepts_numbers_and_names():
    assert cli.parse_platform_selection("1") == ["indeed"]
    assert cli.parse_platform_selection(" Rozee.pk ") == ["rozee"]
    assert cli.parse_platform_selection("3") == ["jobz"]
    assert cli.parse_platform_selection("all") == ["indeed", "rozee", "jobz"]
    assert cli.parse_platform_selection("9") is None


def test_prompts_repeat_until_valid(capsys):
    answers = iter(["", "7", "2"])
    assert cli.request_platforms(lambda prompt: next(answers)) == ["rozee"]

    roles = iter([" , ", "Developer, Clerk ,"])
    assert cli.request_roles(lambda prompt: next(roles)) == ["Developer", "Clerk"]
    assert "Please enter at least one job role." in capsys.readouterr().out


def test_store_outage_exits_with_status_one(monkeypatch):
    @contextmanager
    def unavailable(app_settings=None):
        raise StoreUnavailableError("MongoDB unreachable at mongodb://127.0.0.1:27017")
        yield

    monkeypatch.setattr(cli, "connect_job_store", unavailable)

    assert cli.main(["scrape", "--platform", "indeed", "--roles", "Developer"]) == 1


def test_scrape_command_replays_snapshots(monkeypatch, store, tmp_path, capsys):
    SnapshotFileManager(str(tmp_path)).save_entries(
        "indeed",
        "Developer",
        [{"listing": {"title": "Software Developer", "link": "https://x.test/viewjob?jk=abc123"}}],
    )

    @contextmanager
    def open_store(app_settings=None):
        yield store

    monkeypatch.setattr(cli, "connect_job_store", open_store)
    monkeypatch.setattr(cli.settings, "JOB_SCRAPER_RESULTS_PER_ROLE", 5)

    argv = ["scrape", "--platform", "1", "--roles", "Developer", "--snapshot-dir", str(tmp_path)]
    exit_code = cli.main(argv + ["--role-timeout", "30"])

    assert exit_code == 0
    assert store.get_job("indeed-abc123") is not None
    assert "1 new jobs saved from Indeed.com" in capsys.readouterr().out
