from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from photonav.features.lookup import (
    LookupConfigurationError,
    LookupInputError,
    LookupRequestError,
    StudentLookupClient,
    StudentNotFoundError,
)

STUDENT_ROW = {
    "cin": "AB123456",
    "nom": "Alaoui",
    "prenom": "Salma",
    "numero_examen": 1042,
    "concours": "Génie Informatique",
    "salle": "Amphi-2",
    "created_at": "2024-06-01T08:00:00Z",
}


def _client(handler, **kwargs) -> StudentLookupClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return StudentLookupClient(
        kwargs.pop("base_url", "https://db.example.test/"),
        kwargs.pop("api_key", "secret-key"),
        client=http,
        **kwargs,
    )


def test_find_by_cin_returns_first_row() -> None:
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = request.url
        captured["headers"] = request.headers
        return httpx.Response(200, json=[STUDENT_ROW])

    record = asyncio.run(_client(handler).find_by_cin("  AB123456 "))

    assert record.salle == "Amphi-2"
    assert record.destination == "Amphi-2"
    assert record.numero_examen == "1042"
    assert record.full_name == "Salma Alaoui"
    assert captured["url"].path == "/rest/v1/etudiant"
    assert captured["url"].params["cin"] == "eq.AB123456"
    assert captured["headers"]["apikey"] == "secret-key"
    assert captured["headers"]["authorization"] == "Bearer secret-key"
    assert captured["headers"]["prefer"] == "return=representation"


def test_custom_table_name() -> None:
    paths = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, json=[STUDENT_ROW])

    asyncio.run(_client(handler, table="candidats").find_by_cin("AB123456"))
    assert paths == ["/rest/v1/candidats"]


def test_empty_result_raises_not_found() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[])

    with pytest.raises(StudentNotFoundError) as exc:
        asyncio.run(_client(handler).find_by_cin("ZZ000000"))
    assert exc.value.cin == "ZZ000000"
    assert "Aucun étudiant" in str(exc.value)


def test_blank_cin_is_rejected_without_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover
        raise AssertionError("no request expected")

    with pytest.raises(LookupInputError):
        asyncio.run(_client(handler).find_by_cin("   "))


def test_missing_configuration() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover
        raise AssertionError("no request expected")

    client = _client(handler, api_key=None)
    assert not client.is_configured
    with pytest.raises(LookupConfigurationError):
        asyncio.run(client.find_by_cin("AB123456"))


def test_http_error_status_is_reported() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text=json.dumps({"message": "Invalid API key"}))

    with pytest.raises(LookupRequestError) as exc:
        asyncio.run(_client(handler).find_by_cin("AB123456"))
    assert exc.value.status_code == 401
    assert "Erreur 401" in str(exc.value)


def test_transport_error_is_reported() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(LookupRequestError):
        asyncio.run(_client(handler).find_by_cin("AB123456"))


def test_row_without_salle_is_invalid() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"cin": "AB123456"}])

    with pytest.raises(LookupRequestError):
        asyncio.run(_client(handler).find_by_cin("AB123456"))
