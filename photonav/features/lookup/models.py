from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class StudentRecord(BaseModel):
    """Row of the exam seating table, keyed by national identity number."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    cin: str = Field(..., description="Numéro de carte d'identité")
    nom: Optional[str] = None
    prenom: Optional[str] = None
    numero_examen: Optional[str] = None
    concours: Optional[str] = None
    salle: str = Field(..., min_length=1, description="Salle d'examen, utilisée comme destination")

    @property
    def destination(self) -> str:
        return self.salle

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.prenom, self.nom) if part)
