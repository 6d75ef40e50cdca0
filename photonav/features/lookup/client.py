from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from .errors import (
    LookupConfigurationError,
    LookupInputError,
    LookupRequestError,
    StudentNotFoundError,
)
from .models import StudentRecord

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "etudiant"
DEFAULT_TIMEOUT_S = 10.0


class StudentLookupClient:
    """Resolves a CIN to its exam room through the Supabase REST endpoint."""

    def __init__(
        self,
        base_url: Optional[str],
        api_key: Optional[str],
        *,
        table: str = DEFAULT_TABLE,
        timeout: float = DEFAULT_TIMEOUT_S,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key or ""
        self.table = table
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }

    async def find_by_cin(self, cin: str) -> StudentRecord:
        cin = (cin or "").strip()
        if not cin:
            raise LookupInputError()
        if not self.is_configured:
            raise LookupConfigurationError()

        url = f"{self.base_url}/rest/v1/{self.table}"
        try:
            response = await self._client.get(
                url,
                params={"cin": f"eq.{cin}"},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            logger.error("Lookup request failed: %s", exc)
            raise LookupRequestError(f"Erreur lors de la recherche: {exc}") from exc

        if not response.is_success:
            logger.error("Lookup API error %s: %s", response.status_code, response.text)
            raise LookupRequestError(
                f"Erreur {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        rows = self._parse_rows(response)
        if not rows:
            raise StudentNotFoundError(cin)
        try:
            record = StudentRecord.model_validate(rows[0])
        except ValidationError as exc:
            raise LookupRequestError(f"Réponse invalide: {exc}") from exc
        logger.info("Lookup matched CIN %s -> salle %s", cin, record.salle)
        return record

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @staticmethod
    def _parse_rows(response: httpx.Response) -> list[Dict[str, Any]]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise LookupRequestError("Réponse JSON invalide") from exc
        if not isinstance(payload, list):
            raise LookupRequestError("Réponse inattendue du service de recherche")
        return [row for row in payload if isinstance(row, dict)]
