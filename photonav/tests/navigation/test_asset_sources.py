from __future__ import annotations

import asyncio
from pathlib import Path

import httpx
import pytest

from photonav.features.navigation import HttpAssetSource, LocalAssetSource, SequenceDiscoverer

PNG_HEADERS = {"content-type": "image/png"}


def _http_source(handler) -> HttpAssetSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpAssetSource("http://assets.test/", client=client)


def _published(*paths: str):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.lstrip("/") in paths:
            return httpx.Response(200, headers=PNG_HEADERS, content=b"\x89PNG")
        return httpx.Response(404)

    return handler


def test_http_probe_uses_head_and_accepts_images() -> None:
    methods = []

    def handler(request: httpx.Request) -> httpx.Response:
        methods.append(request.method)
        return httpx.Response(200, headers=PNG_HEADERS)

    source = _http_source(handler)
    assert asyncio.run(source.exists("photos-navigation/Lab-3/1.png"))
    assert methods == ["HEAD"]


def test_http_probe_rejects_html_fallback_page() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"content-type": "text/html; charset=utf-8"})

    assert not asyncio.run(_http_source(handler).exists("photos-navigation/Lab-3/9.png"))


def test_http_probe_falls_back_to_get_when_head_not_allowed() -> None:
    methods = []

    def handler(request: httpx.Request) -> httpx.Response:
        methods.append(request.method)
        if request.method == "HEAD":
            return httpx.Response(405)
        return httpx.Response(200, headers=PNG_HEADERS, content=b"\x89PNG")

    assert asyncio.run(_http_source(handler).exists("photos-navigation/Lab-3/1.png"))
    assert methods == ["HEAD", "GET"]


def test_http_transport_error_reads_as_absent() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    assert not asyncio.run(_http_source(handler).exists("photos-navigation/Lab-3/1.png"))


def test_http_discovery_end_to_end() -> None:
    source = _http_source(
        _published(
            "photos-navigation/Lab-3/1.png",
            "photos-navigation/Lab-3/2.png",
            "photos-navigation/Lab-3/3.png",
            "photos-navigation/Lab-3/5.png",
        )
    )
    sequence = asyncio.run(SequenceDiscoverer(source).discover("Lab-3"))

    assert [step.index for step in sequence] == [1, 2, 3]


def test_http_warm_raises_on_missing_asset() -> None:
    source = _http_source(_published())
    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(source.warm("photos-navigation/Lab-3/1.png"))


def test_url_for_joins_base_and_path() -> None:
    source = HttpAssetSource("http://assets.test/kiosk/")
    assert source.url_for("photos-navigation/Lab-3/1.png") == (
        "http://assets.test/kiosk/photos-navigation/Lab-3/1.png"
    )
    asyncio.run(source.aclose())


def _write_steps(root: Path, destination: str, count: int) -> None:
    folder = root / "photos-navigation" / destination
    folder.mkdir(parents=True)
    for index in range(1, count + 1):
        (folder / f"{index}.png").write_bytes(b"\x89PNG")


def test_local_source_discovery(tmp_path: Path) -> None:
    _write_steps(tmp_path, "Salle-B12", 4)
    source = LocalAssetSource(tmp_path)

    sequence = asyncio.run(SequenceDiscoverer(source).discover("Salle-B12"))

    assert len(sequence) == 4
    assert asyncio.run(source.exists("photos-navigation/Salle-B12/4.png"))
    assert not asyncio.run(source.exists("photos-navigation/Salle-B12/5.png"))


def test_local_source_directory_is_not_a_step(tmp_path: Path) -> None:
    (tmp_path / "photos-navigation" / "Lab" / "1.png").mkdir(parents=True)
    assert not asyncio.run(LocalAssetSource(tmp_path).exists("photos-navigation/Lab/1.png"))


def test_local_warm_reads_file(tmp_path: Path) -> None:
    _write_steps(tmp_path, "Lab", 1)
    asyncio.run(LocalAssetSource(tmp_path).warm("photos-navigation/Lab/1.png"))
    with pytest.raises(FileNotFoundError):
        asyncio.run(LocalAssetSource(tmp_path).warm("photos-navigation/Lab/2.png"))
