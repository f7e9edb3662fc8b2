import pytest

from pokepedia import cli
from pokepedia.errors import CatalogUnavailableError, StoreConnectionError
from pokepedia.pipeline.driver import RunSummary
from pokepedia.storage.document_store import SQLiteDocumentStore
from tests.helpers import BASE, build_catalog_api


@pytest.fixture
def offline(monkeypatch):
    """Route every RetryingFetcher built by the CLI to the fake API."""
    api = build_catalog_api()
    original = cli.RetryingFetcher.from_config.__func__

    def from_config(cls, config, session=None, **kwargs):
        return original(cls, config, session=api, sleep=lambda s: None)

    monkeypatch.setattr(cli.RetryingFetcher, "from_config", classmethod(from_config))
    return api


def test_flags_override_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("POKEPEDIA_LANGUAGE", "fr")
    monkeypatch.setenv("POKEPEDIA_MAX_ATTEMPTS", "4")
    args = cli.build_parser().parse_args(["--language", "de", "--store-path", str(tmp_path / "x.sqlite")])

    config = cli.config_from_args(args)

    assert config.language == "de"
    assert config.max_attempts == 4
    assert config.store_path == tmp_path / "x.sqlite"


def test_main_runs_catalog_and_exits_zero(offline, tmp_path):
    db = tmp_path / "pokepedia.sqlite"

    code = cli.main(["--api-base-url", BASE, "--store-path", str(db), "--retry-delay", "0"])

    assert code == 0
    with SQLiteDocumentStore(db) as store:
        assert store.names() == ["Bulbasaur", "Ivysaur", "Venusaur"]


def test_per_entry_failures_still_exit_zero(offline, tmp_path):
    offline.fail(f"{BASE}/pokemon/ivysaur/")

    code = cli.main(["--api-base-url", BASE, "--store-path", str(tmp_path / "p.sqlite"), "--max-attempts", "2"])

    assert code == 0


def test_catalog_failure_exits_one(offline, tmp_path):
    offline.fail(f"{BASE}/pokemon-species/?limit=2000")

    code = cli.main(["--api-base-url", BASE, "--store-path", str(tmp_path / "p.sqlite"), "--max-attempts", "1"])

    assert code == 1


def test_store_failure_exits_one(monkeypatch):
    def refuse(config):
        raise StoreConnectionError("cannot open document store")

    monkeypatch.setattr(cli, "run", refuse)

    assert cli.main([]) == 1


def test_report_logs_summary(caplog):
    caplog.set_level("INFO", logger="pokepedia")

    cli.report(RunSummary(processed_count=2))

    assert "fetched 2" in caplog.text
    assert '"processed": 2' in caplog.text


def test_invalid_flag_value_exits_with_usage_error(monkeypatch):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--max-attempts", "0"])
    assert excinfo.value.code == 2
