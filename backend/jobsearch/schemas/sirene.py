"""Payload schemas for the INSEE SIRENE ``/siret`` endpoint."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

_CONFIG = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)


class LegalUnitPayload(BaseModel):
    model_config = _CONFIG

    name: str | None = Field(None, alias="denominationUniteLegale")
    last_name: str | None = Field(None, alias="nomUniteLegale")
    first_name: str | None = Field(None, alias="prenom1UniteLegale")
    acronym: str | None = Field(None, alias="sigleUniteLegale")
    naf_code: str | None = Field(None, alias="activitePrincipaleUniteLegale")
    category: str | None = Field(None, alias="categorieEntreprise")
    headcount_range: str | None = Field(None, alias="trancheEffectifsUniteLegale")
    creation_date: str | None = Field(None, alias="dateCreationUniteLegale")

    @property
    def display_name(self) -> str | None:
        if self.name:
            return self.name
        # Sole proprietors have no denomination, only a person's name
        person = " ".join(part for part in (self.first_name, self.last_name) if part)
        return person or None


class AddressPayload(BaseModel):
    model_config = _CONFIG

    street_number: str | None = Field(None, alias="numeroVoieEtablissement")
    street_type: str | None = Field(None, alias="typeVoieEtablissement")
    street_name: str | None = Field(None, alias="libelleVoieEtablissement")
    postal_code: str | None = Field(None, alias="codePostalEtablissement")
    city: str | None = Field(None, alias="libelleCommuneEtablissement")
    commune_code: str | None = Field(None, alias="codeCommuneEtablissement")

    @property
    def street(self) -> str | None:
        parts = [
            part
            for part in (self.street_number, self.street_type, self.street_name)
            if part
        ]
        return " ".join(parts) or None


class PeriodPayload(BaseModel):
    model_config = _CONFIG

    sign: str | None = Field(None, alias="enseigne1Etablissement")
    usual_name: str | None = Field(None, alias="denominationUsuelleEtablissement")


class EstablishmentPayload(BaseModel):
    model_config = _CONFIG

    siren: str | None = None
    siret: str | None = None
    creation_date: str | None = Field(None, alias="dateCreationEtablissement")
    last_update: str | None = Field(None, alias="dateDernierTraitementEtablissement")
    legal_unit: LegalUnitPayload | None = Field(None, alias="uniteLegale")
    address: AddressPayload | None = Field(None, alias="adresseEtablissement")
    periods: list[PeriodPayload] = Field(
        default_factory=list, alias="periodesEtablissement"
    )

    @field_validator("periods", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return [] if value is None else value


class EstablishmentSearchResponse(BaseModel):
    model_config = _CONFIG

    establishments: list[dict] = Field(default_factory=list, alias="etablissements")

    @field_validator("establishments", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return [] if value is None else value
