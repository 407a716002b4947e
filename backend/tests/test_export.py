import json

import pytest

from jobsearch.errors import NothingToExportError
from jobsearch.models import Company, JobOffer
from jobsearch.services.aggregator import ResultCollection
from jobsearch.services.export import (
    ExportFormat,
    ExportKind,
    csv_escape,
    export_companies_csv,
    export_delimited,
    export_structured,
    render_export,
    write_export,
)


def test_csv_escape():
    assert csv_escape(None) == ""
    assert csv_escape("plain") == "plain"
    assert csv_escape("a;b") == '"a;b"'
    assert csv_escape('say "hi"') == '"say ""hi"""'
    assert csv_escape("two\nlines") == '"two\nlines"'
    assert csv_escape("carriage\rreturn") == '"carriage\rreturn"'
    assert csv_escape("a,b") == "a,b"
    assert csv_escape("a,b", ",") == '"a,b"'
    assert csv_escape(12) == "12"


def test_export_delimited():
    content = export_delimited([["1", None], ["x;y", "z"]], ["A", "B"])
    assert content == b'A;B\n1;\n"x;y";z\n'


def test_export_delimited_encoding():
    content = export_delimited([["Île"]], ["Région"], encoding="latin-1")
    assert content.decode("latin-1") == "Région\nÎle\n"


def test_export_companies_csv_sorted_by_name():
    companies = [Company(siren="1", name="Zeta"), Company(siren="2", name="alpha")]
    lines = export_companies_csv(companies).decode("utf-8").splitlines()
    assert lines[0].startswith("Nom entreprise;Nom commercial;SIREN")
    assert lines[1].startswith("alpha;")
    assert lines[2].startswith("Zeta;")


def test_export_structured():
    content = export_structured([JobOffer(id="1", title="Dev")])
    data = json.loads(content.decode("utf-8"))
    assert data[0]["id"] == "1"
    assert data[0]["title"] == "Dev"
    assert data[0]["source_type"] == "API France Travail"
    assert content.startswith(b"[\n  {")


def test_export_structured_keeps_accents():
    content = export_structured([Company(name="Société Générale")])
    assert "Société Générale".encode("utf-8") in content


def test_render_export_rejects_empty_selection():
    collection = ResultCollection()
    collection.add_companies([Company(siren="1")])
    with pytest.raises(NothingToExportError):
        render_export(collection, ExportKind.OFFERS, ExportFormat.CSV)


def test_write_export(tmp_path):
    collection = ResultCollection()
    collection.add_offers([JobOffer(id="1", title="Dev; Java")])
    target = write_export(
        tmp_path / "offres.csv", collection, ExportKind.OFFERS, ExportFormat.CSV
    )
    lines = target.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert lines[1].startswith('1;"Dev; Java";')


def test_write_export_empty_writes_nothing(tmp_path):
    target = tmp_path / "empty.json"
    with pytest.raises(NothingToExportError):
        write_export(
            target, ResultCollection(), ExportKind.COMPANIES, ExportFormat.JSON
        )
    assert not target.exists()
