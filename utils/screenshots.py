"""
Screenshot resolution for report hero images.

Two ways to get a picture of a page:
- build a URL for a third-party screenshot service (cheap, used in reports)
- capture a PNG with Playwright, either in a local headless Chromium or in a
  remote browser reached over CDP
"""

import logging
from typing import Optional
from urllib.parse import quote

from playwright.async_api import async_playwright

logger = logging.getLogger(__name__)

MSHOTS_URL = "https://s.wordpress.com/mshots/v1/{URL}?w=1200"
SCREENSHOT_USER_AGENT = "Mozilla/5.0 (compatible; CROAuditBot/1.0)"

BROWSER_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",  # Prevents memory issues in Docker
    "--no-sandbox",  # Required in some containerized environments
    "--disable-setuid-sandbox",
    "--disable-gpu",
]


def screenshot_url(url: str, template: Optional[str] = None) -> str:
    """Screenshot service URL for ``url``; ``template`` must contain ``{URL}``"""
    encoded = quote(url, safe="")
    return (template or MSHOTS_URL).replace("{URL}", encoded)


async def capture_screenshot(
    url: str,
    ws_endpoint: Optional[str] = None,
    width: int = 1200,
    height: int = 800,
    timeout_ms: int = 30000,
) -> bytes:
    """
    Capture a full-page PNG of ``url``.

    Args:
        url: Absolute http(s) URL
        ws_endpoint: CDP endpoint of a remote browser; launches Chromium locally if None
        width / height: viewport size
        timeout_ms: navigation timeout

    Raises:
        RuntimeError: the browser could not be started or reached
    """
    async with async_playwright() as p:
        try:
            if ws_endpoint:
                logger.info(f"🌐 Connecting to remote browser for {url}")
                browser = await p.chromium.connect_over_cdp(ws_endpoint)
            else:
                browser = await p.chromium.launch(headless=True, args=BROWSER_ARGS)
        except Exception as e:
            logger.error(f"❌ Browser launch failed: {e}")
            raise RuntimeError(f"Failed to launch browser: {e}") from e

        try:
            context = await browser.new_context(
                viewport={"width": width, "height": height},
                user_agent=SCREENSHOT_USER_AGENT,
            )
            page = await context.new_page()
            await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
            png = await page.screenshot(type="png", full_page=True)
            logger.info(f"📸 Captured {url} ({len(png)} bytes)")
            return png
        finally:
            await browser.close()
