from functools import lru_cache
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode

# Legal-form codes of commercial companies (SARL, SAS, SASU, SA, SNC...).
# Used as an allow-list when sole proprietors are excluded from a Pappers search.
DEFAULT_COMPANY_LEGAL_FORMS = [
    "5499", "5505", "5510", "5515", "5520", "5530", "5542", "5543", "5546",
    "5547", "5548", "5551", "5552", "5553", "5554", "5558", "5559", "5560",
    "5570", "5585", "5599", "5605", "5610", "5615", "5620", "5622", "5625",
    "5630", "5650", "5651", "5660", "5670", "5685", "5699", "5710", "5720",
    "5770", "5785", "5800",
]

_SECRET_FIELDS = {
    "france_travail_client_secret",
    "insee_api_key",
    "pappers_api_key",
    "api_token",
}


class Settings(BaseSettings):
    # France Travail (job offers, OAuth2 client credentials)
    france_travail_client_id: str = ""
    france_travail_client_secret: str = ""
    france_travail_scope: str = "api_offresdemploiv2 o2dsoffre"
    france_travail_api_base_url: str = "https://api.francetravail.io/partenaire"
    france_travail_token_url: str = (
        "https://entreprise.francetravail.fr/connexion/oauth2/access_token"
        "?realm=/partenaire"
    )

    # INSEE SIRENE (business registry)
    insee_api_key: str = ""
    insee_api_base_url: str = "https://api.insee.fr/entreprises/sirene/V3.11"

    # Pappers (company enrichment)
    pappers_api_key: str = ""
    pappers_api_base_url: str = "https://api.pappers.fr/v2"
    pappers_legal_form_codes: Annotated[list[str], NoDecode] = (
        DEFAULT_COMPANY_LEGAL_FORMS
    )

    # Department groupings
    idf_departments: Annotated[list[str], NoDecode] = [
        "75", "77", "78", "91", "92", "93", "94", "95"
    ]
    default_departments: Annotated[list[str], NoDecode] = []
    naf_codes_it: Annotated[list[str], NoDecode] = [
        "62.01Z",
        "62.02A",
        "62.02B",
        "62.03Z",
        "62.09Z",
        "63.11Z",
        "63.12Z",
    ]

    # Limits
    max_results_jobs: int = 100
    max_results_companies: int = 20
    max_departments_per_job_request: int = 5
    max_departments_per_company_request: int = 10
    http_timeout: int = 10

    default_keywords: str = "développeur java"

    # Export
    export_filename_csv: str = "resultats_entreprises.csv"
    export_filename_json: str = "resultats_entreprises.json"
    export_csv_encoding: str = "utf-8"
    export_csv_separator: str = ";"

    # Bearer token guarding the HTTP API; empty disables the check
    api_token: str = ""

    model_config = {"env_file": ".env", "extra": "ignore"}

    @field_validator(
        "pappers_legal_form_codes",
        "idf_departments",
        "default_departments",
        "naf_codes_it",
        mode="before",
    )
    @classmethod
    def _split_comma_list(cls, value):
        # Environment values come as "75,77,78"
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    def has_france_travail_credentials(self) -> bool:
        return bool(self.france_travail_client_id and self.france_travail_client_secret)

    def has_insee_api_key(self) -> bool:
        return bool(self.insee_api_key)

    def has_pappers_api_key(self) -> bool:
        return bool(self.pappers_api_key)

    def masked(self) -> dict:
        """Settings as a dict with secrets replaced by ``***``."""
        data = self.model_dump()
        for name in _SECRET_FIELDS:
            if data.get(name):
                data[name] = "***"
        return data


@lru_cache
def get_settings() -> Settings:
    return Settings()
