"""
Tests for the command line entry point.

Network collaborators are patched out; the scan itself runs against the
in-memory fakes from conftest.
"""

import json
from unittest.mock import MagicMock, patch

import pytest

from conftest import FakeExtractor, FakeFetcher, entries
from openscan import cli
from openscan.exceptions import FetchError
from openscan.report import NodeReport

ROOT = "http://host/files/"


@pytest.fixture
def config_path(tmp_path):
    return str(tmp_path / "config.toml")


@pytest.fixture
def fake_network():
    pages = {
        ROOT: entries(("a.pdf", "2K"), "sub/"),
        ROOT + "sub/": entries(("b.mp4", "1M")),
    }
    fetcher = FakeFetcher(pages)
    fetcher.robots_allows = MagicMock(return_value=True)

    with patch.object(cli, "HttpFetcher", return_value=fetcher) as fetcher_cls, \
            patch.object(cli, "LinkExtractor", FakeExtractor), \
            patch.object(cli, "install_signal_handlers"):
        yield fetcher, fetcher_cls


def test_rejects_non_http_url(capsys):
    assert cli.main(["ftp://host/files/"]) == 1
    assert "must start with http" in capsys.readouterr().out


def test_parser_defaults():
    args = cli.build_parser().parse_args([ROOT])

    assert args.depth is None
    assert args.timeout is None
    assert args.no_nsfw is False
    assert args.config == "resources/config.toml"


def test_full_run_prints_and_saves_report(fake_network, config_path, tmp_path, capsys):
    output = tmp_path / "report.json"

    code = cli.main([ROOT, "--no-nsfw", "--no-progress", "--config", config_path,
                     "-d", "2", "-o", str(output)])

    assert code == 0
    out = capsys.readouterr().out
    assert "Scan complete" in out
    assert "Total files: 2" in out
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["total_files"] == 2
    assert data["total_size"] == 2048 + 1_048_576
    assert data["largest_directory"]["url"] == ROOT + "sub/"


def test_report_inconsistencies_are_printed(fake_network, config_path, capsys):
    assert cli.main([ROOT, "--no-nsfw", "--no-progress", "--config", config_path]) == 0
    assert "Report inconsistency" not in capsys.readouterr().out

    with patch.object(NodeReport, "check_invariants", return_value=["total_files mismatch"]):
        assert cli.main([ROOT, "--no-nsfw", "--no-progress", "--config", config_path]) == 0

    assert "[!] Report inconsistency: total_files mismatch" in capsys.readouterr().out


def test_config_supplies_scan_defaults(fake_network, tmp_path, capsys):
    fetcher, fetcher_cls = fake_network
    config = tmp_path / "config.toml"
    config.write_text("[scanner]\ndefault_depth = 0\ndefault_timeout = 9\ndelay = 0.5\n",
                      encoding="utf-8")

    assert cli.main([ROOT, "--no-nsfw", "--no-progress", "--config", str(config)]) == 0

    assert fetcher.requested == [ROOT]
    kwargs = fetcher_cls.call_args.kwargs
    assert kwargs["timeout"] == 9
    assert kwargs["delay"] == 0.5


def test_root_fetch_failure_exits_with_error(fake_network, config_path, capsys):
    fetcher, _ = fake_network
    fetcher.pages[ROOT] = FetchError(ROOT, "HTTP 500", status=500)

    assert cli.main([ROOT, "--no-nsfw", "--no-progress", "--config", config_path]) == 1
    assert "HTTP 500" in capsys.readouterr().out


def test_robots_disallow_stops_scan(fake_network, config_path, capsys):
    fetcher, _ = fake_network
    fetcher.robots_allows.return_value = False

    assert cli.main([ROOT, "--no-nsfw", "--no-progress", "--config", config_path]) == 1
    assert fetcher.requested == []


def test_ignore_robots_skips_check(fake_network, config_path):
    fetcher, _ = fake_network
    fetcher.robots_allows.return_value = False

    assert cli.main([ROOT, "--no-nsfw", "--no-progress", "--ignore-robots",
                     "--config", config_path]) == 0
    fetcher.robots_allows.assert_not_called()


def test_invalid_config_exits_with_error(fake_network, tmp_path, capsys):
    config = tmp_path / "config.toml"
    config.write_text("[thresholds]\nporn = \"high\"\n", encoding="utf-8")

    assert cli.main([ROOT, "--no-nsfw", "--config", str(config)]) == 1
    assert "Configuration error" in capsys.readouterr().out


def test_detector_is_built_from_config(fake_network, config_path):
    with patch.object(cli, "ensure_model", return_value="model.onnx") as ensure, \
            patch.object(cli.NSFWDetector, "from_model_file") as from_model_file:
        assert cli.main([ROOT, "--no-progress", "--update-model", "--config", config_path]) == 0

    assert ensure.call_args.kwargs["update"] is True
    model_path, thresholds, _ = from_model_file.call_args[0]
    assert model_path == "model.onnx"
    assert thresholds.porn == 0.5
