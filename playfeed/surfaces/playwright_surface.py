"""Content surfaces backed by Playwright browser contexts.

One browser is shared; each surface gets its own context (cookies, storage and
script state are isolated) with a single page. Everything a surface does runs in
tasks on the event loop that created it, so `inject`, `reload` and `release`
return immediately.

    factory = PlaywrightSurfaceFactory(settings=settings)
    pool = SurfacePoolManager(factory=factory, capacity=settings.capacity)
    ...
    await factory.close()
"""

from __future__ import annotations

import asyncio
import logging

from playwright.async_api import Browser, BrowserContext, Page, Playwright, Route, async_playwright
from playwright.async_api import Error as PlaywrightError

from playfeed.instrumentation import MESSAGE_BINDING
from playfeed.settings import PoolSettings
from playfeed.surfaces.base import SurfaceHooks


logger = logging.getLogger(__name__)


class PlaywrightSurface:
    def __init__(self, *, factory: PlaywrightSurfaceFactory, game_id: str, url: str, hooks: SurfaceHooks) -> None:
        self.game_id = game_id
        self.url = url
        self._factory = factory
        self._hooks = hooks
        self._context: BrowserContext | None = None
        self._page: Page | None = None
        self._released = False

        # Scripts are evaluated one at a time in issue order, after the first load.
        self._scripts: asyncio.Queue[str] = asyncio.Queue()
        self._tasks: set[asyncio.Task[None]] = set()
        self._opening = self._spawn(self._open())

    @property
    def page(self) -> Page | None:
        return self._page

    @property
    def released(self) -> bool:
        return self._released

    def inject(self, script: str) -> None:
        if self._released:
            return
        self._scripts.put_nowait(script)

    def reload(self) -> None:
        if self._released or self._page is None:
            return
        self._spawn(self._reload(self._page))

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        # The opening task notices the flag itself and closes what it created.
        for task in list(self._tasks):
            if task is not self._opening:
                task.cancel()
        if self._context is not None:
            self._spawn(self._close(self._context))

    async def ready(self) -> bool:
        """Wait for the first navigation to finish. False if it failed or was released."""

        try:
            await asyncio.shield(self._opening)
        except asyncio.CancelledError:
            return False
        return self._page is not None and not self._released

    async def flush(self) -> None:
        """Wait until every queued script has been handed to the page."""

        await self._scripts.join()

    # -- internals ------------------------------------------------------------

    def _spawn(self, coro) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _open(self) -> None:
        try:
            context = await self._factory.new_context()
            self._context = context
            if self._released:
                await self._close(context)
                return
            await context.expose_function(MESSAGE_BINDING, self._hooks.on_message)
            await context.add_init_script(self._hooks.init_script)
            await context.route("**/*", self._route)

            page = await context.new_page()
            page.on("load", lambda _page: self._hooks.on_loaded())
            await page.goto(self.url, wait_until="load")
            self._page = page
            if self._released:
                await self._close(context)
                return
        except PlaywrightError:
            logger.warning("surface %s failed to open %s", self.game_id, self.url, exc_info=True)
            return

        self._spawn(self._drain_scripts(page))

    async def _drain_scripts(self, page: Page) -> None:
        while True:
            script = await self._scripts.get()
            try:
                await page.evaluate(script)
            except PlaywrightError:
                logger.debug("script failed in surface %s", self.game_id, exc_info=True)
            finally:
                self._scripts.task_done()

    async def _reload(self, page: Page) -> None:
        try:
            await page.reload(wait_until="load")
        except PlaywrightError:
            logger.warning("surface %s failed to reload", self.game_id, exc_info=True)

    async def _route(self, route: Route) -> None:
        if self._hooks.allow_request(route.request.url):
            await route.continue_()
        else:
            logger.debug("surface %s blocked %s", self.game_id, route.request.url)
            await route.abort("blockedbyclient")

    async def _close(self, context: BrowserContext) -> None:
        try:
            await context.close()
        except PlaywrightError:
            logger.debug("context for %s already closed", self.game_id, exc_info=True)


class PlaywrightSurfaceFactory:
    """Creates `PlaywrightSurface`s. The browser is launched on first use."""

    def __init__(self, *, settings: PoolSettings) -> None:
        self._settings = settings
        self._pw: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()

    def create(self, *, game_id: str, url: str, hooks: SurfaceHooks) -> PlaywrightSurface:
        return PlaywrightSurface(factory=self, game_id=game_id, url=url, hooks=hooks)

    async def new_context(self) -> BrowserContext:
        browser = await self._ensure_browser()
        s = self._settings
        return await browser.new_context(
            viewport={"width": s.viewport_width, "height": s.viewport_height},
            is_mobile=s.browser_engine != "firefox",
            has_touch=True,
        )

    async def _ensure_browser(self) -> Browser:
        async with self._lock:
            if self._browser is None:
                self._pw = await async_playwright().start()
                launcher = getattr(self._pw, self._settings.browser_engine)
                self._browser = await launcher.launch(
                    headless=self._settings.headless,
                    # Surfaces start muted by script; autoplay must not need a gesture.
                    args=["--autoplay-policy=no-user-gesture-required"]
                    if self._settings.browser_engine == "chromium"
                    else None,
                )
                logger.info("launched %s for content surfaces", self._settings.browser_engine)
            return self._browser

    async def close(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._pw is not None:
            await self._pw.stop()
            self._pw = None
