"""Selenium browser fetcher."""

from __future__ import annotations

import logging
from typing import Any

from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.chrome.service import Service as ChromeService
from webdriver_manager.chrome import ChromeDriverManager

from .errors import FetchError
from .validation import is_supported_url


def build_chrome_options(*, user_agent: str, headless: bool = True) -> webdriver.ChromeOptions:
    """Chrome options with a fixed user agent and automation markers hidden."""
    options = webdriver.ChromeOptions()
    if headless:
        options.add_argument("--headless=new")
    options.add_argument("--no-sandbox")
    options.add_argument("--disable-setuid-sandbox")
    options.add_argument("--disable-dev-shm-usage")
    options.add_argument("--disable-blink-features=AutomationControlled")
    options.add_argument(f"user-agent={user_agent}")
    options.add_experimental_option("excludeSwitches", ["enable-automation"])
    options.add_experimental_option("useAutomationExtension", False)
    # Return once the DOM is parsed instead of waiting for every resource.
    options.page_load_strategy = "eager"
    return options


class SeleniumFetcher:
    """Headless Chrome that loads every URL in its own short-lived tab."""

    def __init__(
        self,
        *,
        user_agent: str,
        timeout: float,
        logger: logging.Logger,
        headless: bool = True,
    ) -> None:
        self._logger = logger
        options = build_chrome_options(user_agent=user_agent, headless=headless)
        try:
            service = ChromeService(ChromeDriverManager().install())
            self._driver: Any = webdriver.Chrome(service=service, options=options)
            self._driver.set_page_load_timeout(timeout)
            self._home_handle = self._driver.current_window_handle
        except Exception as exc:  # pragma: no cover - integration behavior
            raise FetchError(f"Failed to start Selenium driver: {exc}") from exc

    def fetch(self, url: str) -> str:
        """Load ``url`` in a fresh tab and return its page source."""
        if not is_supported_url(url):
            raise FetchError(f"Unsupported URL: {url}")
        try:
            self._driver.switch_to.new_window("tab")
        except WebDriverException as exc:
            raise FetchError(f"Cannot open a tab for {url}: {exc.msg or exc}") from exc
        try:
            self._driver.get(url)
            return str(self._driver.page_source)
        except WebDriverException as exc:
            raise FetchError(f"Failed to load {url}: {exc.msg or exc}") from exc
        finally:
            self._close_tab()

    def _close_tab(self) -> None:
        try:
            self._driver.close()
        except WebDriverException as exc:
            self._logger.debug("Closing tab failed: %s", exc)
        # new_window needs a live current handle, so always return home.
        try:
            self._driver.switch_to.window(self._home_handle)
        except WebDriverException as exc:
            self._logger.warning("Cannot return to the home tab: %s", exc)

    def close(self) -> None:
        try:
            self._driver.quit()
        except WebDriverException as exc:  # pragma: no cover - integration behavior
            self._logger.debug("Quitting driver failed: %s", exc)
