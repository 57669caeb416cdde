from __future__ import annotations

import pytest

from fakes import FakePage, FakePlaywright, hero_rects
from responsive_pictures import mcp_server


class FakePlaywrightManager:
    def __init__(self, playwright: FakePlaywright) -> None:
        self.playwright = playwright

    async def __aenter__(self) -> FakePlaywright:
        return self.playwright

    async def __aexit__(self, *exc_info) -> None:
        return None


def install(monkeypatch, page: FakePage) -> None:
    playwright = FakePlaywright(page)
    monkeypatch.setattr(mcp_server, "async_playwright", lambda: FakePlaywrightManager(playwright))


@pytest.mark.asyncio
async def test_picture_markup_returns_page_markup(monkeypatch) -> None:
    page = FakePage()
    page.add_picture(
        "http://localhost:8080/assets/img/hero.jpg",
        rects=hero_rects((160, 90), (512, 288), (1200, 675)),
    )
    install(monkeypatch, page)

    markup = await mcp_server.picture_markup("http://localhost:8080/")

    assert markup.startswith("<picture>")
    assert "| jpeg %}" in markup


@pytest.mark.asyncio
async def test_picture_markup_reports_unloadable_page(monkeypatch) -> None:
    install(monkeypatch, FakePage(status=500))

    with pytest.raises(RuntimeError, match="HTTP 500"):
        await mcp_server.picture_markup("http://localhost:8080/")


@pytest.mark.asyncio
async def test_picture_markup_requires_raster_images(monkeypatch) -> None:
    page = FakePage()
    page.add_picture("http://localhost:8080/assets/logo.svg")
    install(monkeypatch, page)

    with pytest.raises(RuntimeError, match="No raster"):
        await mcp_server.picture_markup("http://localhost:8080/")


@pytest.mark.asyncio
async def test_picture_markup_writes_nothing(monkeypatch, tmp_path) -> None:
    page = FakePage()
    page.add_picture(
        "http://localhost:8080/assets/img/hero.jpg",
        rects=hero_rects((160, 90), (512, 288), (1200, 675)),
    )
    install(monkeypatch, page)
    monkeypatch.chdir(tmp_path)

    await mcp_server.picture_markup("http://localhost:8080/")

    assert list(tmp_path.iterdir()) == []
