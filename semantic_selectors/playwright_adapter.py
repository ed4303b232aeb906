"""Bridge from resolved locators to live Playwright pages."""

from __future__ import annotations

import logging
import os
from typing import Optional

from playwright.async_api import Frame, Locator as PwLocator, Page
from playwright.async_api import TimeoutError as PwTimeoutError

from .engine import ResolutionEngine
from .errors import SelectorNotFoundError
from .models import Locator

log = logging.getLogger(__name__)

LOCATOR_TIMEOUT = int(os.getenv("LOCATOR_TIMEOUT", "2000"))  # ms


def to_playwright(page: Page | Frame, locator: Locator) -> PwLocator:
    """Return the Playwright locator for a synthesized expression."""
    return page.locator(locator.expression)


async def locate(
    page: Page | Frame,
    engine: ResolutionEngine,
    text: str,
    context: Optional[str] = None,
    *,
    timeout_ms: int = LOCATOR_TIMEOUT,
) -> PwLocator:
    """Resolve ``text`` against the snapshot and wait for it on the live page.

    Ambiguity and store errors propagate unchanged; an element that resolves
    in the snapshot but never attaches raises :class:`SelectorNotFoundError`.
    """

    resolution = engine.resolve(text, context)
    loc = to_playwright(page, resolution.locator)
    try:
        await loc.first.wait_for(state="attached", timeout=timeout_ms)
    except PwTimeoutError as exc:
        log.warning("Locator %s for %r did not attach: %s", resolution.locator.expression, text, exc)
        raise SelectorNotFoundError(
            f"Element '{resolution.record.identifier}' is not present on the page",
            details={
                "query": text,
                "context": context,
                "locator": resolution.locator.to_dict(),
                "timeout_ms": timeout_ms,
            },
        ) from exc
    return loc
