from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional

import pytest


@dataclass
class FakeBrowserBehaviour:
    start_error: Optional[Exception] = None
    launch_error: Optional[Exception] = None
    set_content_error: Optional[Exception] = None
    pdf_error: Optional[Exception] = None
    close_error: Optional[Exception] = None
    hang_on_set_content: bool = False
    hang_on_close: bool = False
    hang_on_start: bool = False
    start_delay: float = 0.0
    pdf_bytes: bytes = b"%PDF-1.7 fake document"


class FakePage:
    def __init__(self, behaviour: FakeBrowserBehaviour, **kwargs: Any) -> None:
        self.behaviour = behaviour
        self.new_page_kwargs = kwargs
        self.content: Optional[str] = None
        self.set_content_kwargs: dict = {}
        self.pdf_kwargs: Optional[dict] = None

    async def set_content(self, html: str, **kwargs: Any) -> None:
        self.content = html
        self.set_content_kwargs = kwargs
        if self.behaviour.set_content_error:
            raise self.behaviour.set_content_error
        if self.behaviour.hang_on_set_content:
            await asyncio.sleep(3600)

    async def pdf(self, **kwargs: Any) -> bytes:
        self.pdf_kwargs = kwargs
        if self.behaviour.pdf_error:
            raise self.behaviour.pdf_error
        return self.behaviour.pdf_bytes


class FakeBrowser:
    def __init__(self, behaviour: FakeBrowserBehaviour) -> None:
        self.behaviour = behaviour
        self.pages: list[FakePage] = []
        self.closed = False

    async def new_page(self, **kwargs: Any) -> FakePage:
        page = FakePage(self.behaviour, **kwargs)
        self.pages.append(page)
        return page

    async def close(self) -> None:
        if self.behaviour.hang_on_close:
            await asyncio.sleep(3600)
        self.closed = True
        if self.behaviour.close_error:
            raise self.behaviour.close_error


class FakeChromium:
    def __init__(self, behaviour: FakeBrowserBehaviour) -> None:
        self.behaviour = behaviour
        self.launch_kwargs: Optional[dict] = None
        self.browser: Optional[FakeBrowser] = None

    async def launch(self, **kwargs: Any) -> FakeBrowser:
        self.launch_kwargs = kwargs
        if self.behaviour.launch_error:
            raise self.behaviour.launch_error
        self.browser = FakeBrowser(self.behaviour)
        return self.browser


class FakePlaywright:
    def __init__(self, behaviour: FakeBrowserBehaviour) -> None:
        self.chromium = FakeChromium(behaviour)
        self.stopped = False

    async def stop(self) -> None:
        self.stopped = True


class FakePlaywrightFactory:
    """Stands in for playwright.async_api.async_playwright."""

    def __init__(self) -> None:
        self.behaviour = FakeBrowserBehaviour()
        self.calls = 0
        self.instances: list[FakePlaywright] = []

    def __call__(self) -> "FakePlaywrightFactory":
        self.calls += 1
        return self

    async def start(self) -> FakePlaywright:
        if self.behaviour.start_error:
            raise self.behaviour.start_error
        if self.behaviour.hang_on_start:
            await asyncio.sleep(3600)
        if self.behaviour.start_delay:
            await asyncio.sleep(self.behaviour.start_delay)
        instance = FakePlaywright(self.behaviour)
        self.instances.append(instance)
        return instance

    @property
    def playwright(self) -> FakePlaywright:
        return self.instances[-1]

    @property
    def browser(self) -> Optional[FakeBrowser]:
        return self.playwright.chromium.browser

    @property
    def page(self) -> FakePage:
        return self.browser.pages[-1]


@pytest.fixture
def fake_playwright() -> FakePlaywrightFactory:
    return FakePlaywrightFactory()
