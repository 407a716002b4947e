import json
from unittest.mock import patch

import pytest

from jobsearch import cli


def test_resolve_departments(settings):
    parser = cli.build_parser(settings)

    args = parser.parse_args(["companies", "--region", "Corse"])
    assert cli.resolve_departments(args, settings) == ["2A", "2B"]

    args = parser.parse_args(["jobs", "--department", "69"])
    assert cli.resolve_departments(args, settings) == ["69"]

    args = parser.parse_args(["combined", "--france"])
    assert len(cli.resolve_departments(args, settings)) == 101


def test_resolve_departments_default_to_idf(settings):
    args = cli.build_parser(settings).parse_args(["companies"])
    assert cli.resolve_departments(args, settings) == settings.idf_departments


def test_location_options_are_exclusive(settings):
    with pytest.raises(SystemExit):
        cli.build_parser(settings).parse_args(
            ["jobs", "--metropole", "--department", "75"]
        )


def test_regions_command(capsys):
    with patch.object(cli, "configure_logging"):
        assert cli.main(["regions"]) == 0
    out = capsys.readouterr().out
    assert "Bretagne: 22, 29, 35, 56" in out
    assert "Outre-mer" in out


def test_config_command_masks_secrets(capsys, monkeypatch):
    monkeypatch.setenv("PAPPERS_API_KEY", "pk-live")
    with patch.object(cli, "configure_logging"):
        assert cli.main(["config"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["pappers_api_key"] == "***"


def test_unknown_region_fails(capsys):
    with patch.object(cli, "configure_logging"):
        assert cli.main(["companies", "--region", "Atlantis"]) == 1
