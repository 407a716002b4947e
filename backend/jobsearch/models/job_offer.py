import re
from dataclasses import dataclass

NOT_AVAILABLE = "N/A"

_NON_DEPARTMENT_CHARS = re.compile(r"[^0-9AB]")


@dataclass(frozen=True)
class JobOffer:
    """A job posting from the France Travail offers API."""

    id: str | None = None
    title: str | None = None
    description: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    # Employer
    company_name: str | None = None
    company_description: str | None = None
    company_url: str | None = None
    company_logo_url: str | None = None

    # Recruiter contact, preferred over the employer's generic contact
    contact_email: str | None = None
    contact_name: str | None = None
    contact_phone: str | None = None
    contact_url: str | None = None

    # Workplace
    location_label: str | None = None
    city: str | None = None
    postal_code: str | None = None
    department: str | None = None
    region: str | None = None
    latitude: float | None = None
    longitude: float | None = None

    # Contract terms
    contract_type: str | None = None
    contract_type_label: str | None = None
    contract_nature: str | None = None
    experience_code: str | None = None
    experience_label: str | None = None
    salary: str | None = None
    working_hours_label: str | None = None
    skills: str | None = None

    # Links
    origin_url: str | None = None
    application_url: str | None = None

    source: str = "Offre d'emploi"
    source_type: str = "API France Travail"

    @property
    def summary(self) -> str:
        parts = [self.title or ""]
        if self.contract_type_label:
            parts.append(self.contract_type_label)
        if self.salary:
            parts.append(self.salary)
        return " | ".join(parts)

    @property
    def contact_info(self) -> str:
        parts = [
            value
            for value in (self.contact_email, self.contact_phone, self.contact_name)
            if value
        ]
        return " | ".join(parts) if parts else NOT_AVAILABLE

    def to_csv_row(self) -> list[str | None]:
        return [
            self.id,
            self.title,
            self.description,
            self.created_at,
            self.updated_at,
            self.company_name,
            self.company_description,
            self.company_url,
            self.contact_email,
            self.contact_name,
            self.contact_phone,
            self.contact_url,
            self.city,
            self.postal_code,
            self.department,
            self.region,
            str(self.latitude) if self.latitude is not None else None,
            str(self.longitude) if self.longitude is not None else None,
            self.contract_type_label,
            self.contract_nature,
            self.experience_label,
            self.salary,
            self.working_hours_label,
            self.skills,
            self.origin_url,
            self.application_url,
            self.source,
        ]

    @classmethod
    def csv_headers(cls) -> list[str]:
        return [
            "ID Offre",
            "Intitulé",
            "Description",
            "Date Création",
            "Date MAJ",
            "Entreprise Nom",
            "Entreprise Description",
            "Entreprise URL",
            "Contact Email",
            "Contact Nom",
            "Contact Téléphone",
            "Contact URL",
            "Ville",
            "Code Postal",
            "Département",
            "Région",
            "Latitude",
            "Longitude",
            "Type Contrat",
            "Nature Contrat",
            "Expérience",
            "Salaire",
            "Durée Travail",
            "Compétences",
            "URL Offre",
            "URL Postulation",
            "Source",
        ]


def parse_location_label(label: str | None) -> tuple[str | None, str | None]:
    """Split a France Travail workplace label into (city, department).

    Labels look like ``"Paris - 75"``; the second segment keeps only digits
    and the Corsican letters A/B. Returns ``(None, None)`` when the label has
    no ``" - "`` separator.
    """
    if not label or " - " not in label:
        return None, None
    parts = label.split(" - ")
    city = parts[0].strip() or None
    department = None
    if len(parts) >= 2:
        department = _NON_DEPARTMENT_CHARS.sub("", parts[1])
    return city, department or None
