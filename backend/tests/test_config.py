from jobsearch.config import DEFAULT_COMPANY_LEGAL_FORMS, Settings


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.max_results_jobs == 100
    assert settings.max_results_companies == 20
    assert settings.max_departments_per_job_request == 5
    assert settings.http_timeout == 10
    assert settings.export_csv_separator == ";"
    assert settings.idf_departments[0] == "75"
    assert "62.01Z" in settings.naf_codes_it
    assert settings.pappers_legal_form_codes == DEFAULT_COMPANY_LEGAL_FORMS


def test_comma_separated_lists_from_environment(monkeypatch):
    monkeypatch.setenv("DEFAULT_DEPARTMENTS", "35, 56,29")
    monkeypatch.setenv("NAF_CODES_IT", "62.01Z")
    settings = Settings(_env_file=None)
    assert settings.default_departments == ["35", "56", "29"]
    assert settings.naf_codes_it == ["62.01Z"]


def test_credential_helpers():
    settings = Settings(
        _env_file=None,
        france_travail_client_id="id",
        france_travail_client_secret="",
        insee_api_key="k",
        pappers_api_key="",
    )
    assert not settings.has_france_travail_credentials()
    assert settings.has_insee_api_key()
    assert not settings.has_pappers_api_key()


def test_masked_hides_secrets():
    settings = Settings(
        _env_file=None,
        france_travail_client_id="id",
        france_travail_client_secret="secret",
        pappers_api_key="pk",
    )
    masked = settings.masked()
    assert masked["france_travail_client_id"] == "id"
    assert masked["france_travail_client_secret"] == "***"
    assert masked["pappers_api_key"] == "***"
    assert "secret" not in str(masked.values())
