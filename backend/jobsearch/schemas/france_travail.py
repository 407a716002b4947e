"""Payload schemas for the France Travail offers API.

Every field is optional: an absent key becomes ``None`` (or an empty list)
instead of a missed lookup, and a list sent as ``null`` reads as empty.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

_CONFIG = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)


class EmployerPayload(BaseModel):
    model_config = _CONFIG

    name: str | None = Field(None, alias="nom")
    description: str | None = None
    url: str | None = None
    logo: str | None = None


class ContactPayload(BaseModel):
    model_config = _CONFIG

    email: str | None = Field(None, alias="courriel")
    name: str | None = Field(None, alias="nom")
    phone: str | None = Field(None, alias="telephone")
    application_url: str | None = Field(None, alias="urlPostulation")


class WorkplacePayload(BaseModel):
    model_config = _CONFIG

    label: str | None = Field(None, alias="libelle")
    postal_code: str | None = Field(None, alias="codePostal")
    commune: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class SalaryPayload(BaseModel):
    model_config = _CONFIG

    label: str | None = Field(None, alias="libelle")


class SkillPayload(BaseModel):
    model_config = _CONFIG

    label: str | None = Field(None, alias="libelle")


class PartnerPayload(BaseModel):
    model_config = _CONFIG

    url: str | None = None


class OriginPayload(BaseModel):
    model_config = _CONFIG

    origin_url: str | None = Field(None, alias="urlOrigine")
    partners: list[PartnerPayload] = Field(default_factory=list, alias="partenaires")

    @field_validator("partners", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return [] if value is None else value


class OfferPayload(BaseModel):
    model_config = _CONFIG

    id: str | None = None
    title: str | None = Field(None, alias="intitule")
    description: str | None = None
    created_at: str | None = Field(None, alias="dateCreation")
    updated_at: str | None = Field(None, alias="dateActualisation")

    employer: EmployerPayload | None = Field(None, alias="entreprise")
    contact: ContactPayload | None = None
    workplace: WorkplacePayload | None = Field(None, alias="lieuTravail")

    contract_type: str | None = Field(None, alias="typeContrat")
    contract_type_label: str | None = Field(None, alias="typeContratLibelle")
    contract_nature: str | None = Field(None, alias="natureContrat")
    experience_label: str | None = Field(None, alias="experienceLibelle")
    experience_code: str | None = Field(None, alias="experienceExige")
    salary: SalaryPayload | None = Field(None, alias="salaire")
    working_hours_label: str | None = Field(None, alias="dureeTravailLibelle")
    skills: list[SkillPayload] = Field(default_factory=list, alias="competences")
    origin: OriginPayload | None = Field(None, alias="origineOffre")

    @field_validator("skills", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return [] if value is None else value


class OfferSearchResponse(BaseModel):
    model_config = _CONFIG

    results: list[dict] = Field(default_factory=list, alias="resultats")

    @field_validator("results", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return [] if value is None else value
