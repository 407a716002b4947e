"""Payload schemas for the Pappers ``/recherche`` and ``/entreprise`` endpoints."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

_CONFIG = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)


class HeadOfficePayload(BaseModel):
    model_config = _CONFIG

    siret: str | None = None
    address: str | None = Field(None, alias="adresse_ligne_1")
    postal_code: str | None = Field(None, alias="code_postal")
    city: str | None = Field(None, alias="ville")


class FinancialYearPayload(BaseModel):
    model_config = _CONFIG

    year: int | None = Field(None, alias="annee")
    revenue: int | None = Field(None, alias="chiffre_affaires")
    net_income: int | None = Field(None, alias="resultat")


class PappersCompanyPayload(BaseModel):
    model_config = _CONFIG

    siren: str | None = None
    name: str | None = Field(None, alias="nom_entreprise")
    trade_name: str | None = Field(None, alias="nom_commercial")
    website: str | None = Field(None, alias="site_internet")
    phone: str | None = Field(None, alias="telephone")
    email: str | None = None
    creation_date: str | None = Field(None, alias="date_creation")
    naf_code: str | None = Field(None, alias="code_naf")
    naf_label: str | None = Field(None, alias="libelle_code_naf")
    legal_form: str | None = Field(None, alias="forme_juridique")
    headcount_range: str | None = Field(None, alias="tranche_effectif_salarie")
    establishment_count: int | None = Field(None, alias="nombre_etablissements")
    head_office: HeadOfficePayload | None = Field(None, alias="siege")
    # Most recent financial year first
    finances: list[FinancialYearPayload] = Field(default_factory=list)

    @field_validator("finances", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return [] if value is None else value


class PappersSearchResponse(BaseModel):
    model_config = _CONFIG

    results: list[dict] = Field(default_factory=list, alias="resultats")
    total: int | None = None

    @field_validator("results", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return [] if value is None else value
