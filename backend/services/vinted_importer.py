# backend/services/vinted_importer.py
"""
Import the public listings of a Vinted member profile.

Vinted does not offer a public API and actively blocks scrapers, so the
import walks a ladder of retrieval strategies in order (JSON APIs, the
static profile page, a relay, optionally a real browser). Each strategy
reports a tagged result; the first one that yields items wins. When every
strategy fails the caller gets one ImportExhaustedError that says whether
the profile is blocked or unreachable.
"""
import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup
from pydantic import ValidationError

from config import settings
from schemas.vinted import UNIQUE_SIZE, UNKNOWN_BRAND, VintedItem
from utils.errors import UpstreamServiceError, ValidationFailed
from utils.prices import normalize_price

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
HTML_HEADERS = {
    "User-Agent": BROWSER_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "fr-FR,fr;q=0.9,en;q=0.8",
}
RELAY_URL = "https://api.allorigins.win/get"

_MEMBER_ID_RE = re.compile(r"/member/(\d+)")
_WINDOW_APP_RE = re.compile(r"window\.App\s*=\s*({.*?});\s*(?:</script>|\n)", re.DOTALL)
_CARD_PRICE_RE = re.compile(r"(\d+(?:[.,]\d{1,2})?)\s*€")
_CHALLENGE_MARKERS = ("captcha", "cf-challenge", "datadome", "access denied")


# =========================
# RESULTS
# =========================
class Outcome(str, Enum):
    SUCCESS = "success"
    EMPTY = "empty"
    ERROR = "error"


class FailureKind(str, Enum):
    BLOCKED = "blocked"
    NETWORK = "network"
    PARSE = "parse"
    UNEXPECTED = "unexpected"


@dataclass
class StrategyResult:
    strategy: str
    outcome: Outcome
    items: List[VintedItem] = field(default_factory=list)
    kind: Optional[FailureKind] = None
    detail: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy,
            "outcome": self.outcome.value,
            "kind": self.kind.value if self.kind else None,
            "detail": self.detail,
        }


class StrategyError(Exception):
    """Raised inside a strategy to report a classified failure."""

    def __init__(self, kind: FailureKind, message: str):
        super().__init__(message)
        self.kind = kind


class ImportExhaustedError(UpstreamServiceError):
    """Every strategy of the ladder failed or came back empty."""

    def __init__(self, attempts: Sequence[StrategyResult]):
        self.attempts = list(attempts)
        self.reason = (
            "network"
            if self.attempts and all(a.kind == FailureKind.NETWORK for a in self.attempts)
            else "blocked"
        )
        self.retryable = self.reason == "network"
        if self.reason == "network":
            message = (
                "Automatic Vinted import failed: Vinted could not be reached by any import method. "
                "Try again later or add the items manually."
            )
        else:
            message = (
                "Automatic Vinted import is blocked: Vinted's anti-scraping protection prevented every "
                "import method from reading the profile. Please add the items manually."
            )
        super().__init__(message)

    def payload(self) -> Dict[str, Any]:
        data = super().payload()
        data["reason"] = self.reason
        data["attempts"] = [a.to_dict() for a in self.attempts]
        return data


class ImportUnavailableError(UpstreamServiceError):
    """No import strategy is enabled, so nothing was attempted."""

    retryable = False

    def __init__(self):
        super().__init__(
            "Automatic Vinted import is not available: no import method is enabled on this server "
            "(check IMPORT_STRATEGIES). Please add the items manually."
        )


@dataclass
class ProfileTarget:
    profile_url: str
    user_id: str
    base_url: str


@dataclass
class ImportOutcome:
    strategy: str
    items: List[VintedItem]
    attempts: List[StrategyResult]


# =========================
# NORMALIZATION
# =========================
def extract_user_id(url: str) -> Optional[str]:
    match = _MEMBER_ID_RE.search(url or "")
    return match.group(1) if match else None


def build_target(profile_url: str, default_base_url: Optional[str] = None) -> ProfileTarget:
    url = (profile_url or "").strip()
    parsed = urlparse(url)
    user_id = extract_user_id(parsed.path)
    if parsed.scheme not in ("http", "https") or not user_id:
        raise ValidationFailed.single(
            "profileUrl", "Expected a public Vinted profile URL such as https://www.vinted.fr/member/12345"
        )
    # Keep the profile's own country domain (vinted.fr, vinted.de, ...)
    if "vinted." in parsed.netloc:
        base_url = f"{parsed.scheme}://{parsed.netloc}"
    else:
        base_url = (default_base_url or settings.VINTED_BASE_URL).rstrip("/")
    return ProfileTarget(profile_url=url, user_id=user_id, base_url=base_url)


def _valid_price(value: Any) -> Optional[str]:
    price = normalize_price(value)
    try:
        amount = Decimal(price)
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount < 0:
        return None
    return price


def _photo_url(item: Dict[str, Any]) -> Optional[str]:
    photos = item.get("photos")
    photo = photos[0] if isinstance(photos, list) and photos else item.get("photo")
    if not isinstance(photo, dict):
        return None
    high = photo.get("high_resolution")
    if isinstance(high, dict) and high.get("url"):
        return high["url"]
    return photo.get("full_size_url") or photo.get("url")


def _label(item: Dict[str, Any], *keys: str) -> Optional[str]:
    """First usable text among keys; nested objects contribute their "title"."""
    for key in keys:
        value = item.get(key)
        if isinstance(value, dict):
            value = value.get("title")
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def parse_api_item(item: Any) -> Optional[VintedItem]:
    """Map one Vinted item payload onto VintedItem, None when unusable."""
    if not isinstance(item, dict):
        return None
    title = item.get("title")
    image_url = _photo_url(item)
    if not isinstance(title, str) or not title.strip() or item.get("price") in (None, "") or not image_url:
        return None
    price = _valid_price(item["price"])
    if price is None:
        return None
    return VintedItem(
        title=title.strip(),
        price=price,
        size=_label(item, "size_title", "size") or UNIQUE_SIZE,
        brand=_label(item, "brand_title", "brand") or UNKNOWN_BRAND,
        image_url=image_url,
    )


def parse_api_items(items: Iterable[Any]) -> List[VintedItem]:
    parsed = []
    for raw in items or []:
        try:
            item = parse_api_item(raw)
        except ValidationError as e:
            logger.debug("Skipping malformed Vinted item: %s", e)
            continue
        if item is not None:
            parsed.append(item)
    return parsed


def _looks_like_item(obj: Any) -> bool:
    return isinstance(obj, dict) and "title" in obj and "price" in obj and ("photos" in obj or "photo" in obj)


def _find_item_lists(obj: Any, depth: int = 0) -> List[List[Dict[str, Any]]]:
    """Walk embedded page state and collect every list that holds item payloads."""
    if depth > 12:
        return []
    found = []
    if isinstance(obj, list):
        if any(_looks_like_item(x) for x in obj):
            found.append(obj)
        else:
            for x in obj:
                found.extend(_find_item_lists(x, depth + 1))
    elif isinstance(obj, dict):
        for value in obj.values():
            found.extend(_find_item_lists(value, depth + 1))
    return found


def _embedded_json_blobs(html: str, soup: BeautifulSoup) -> List[Any]:
    blobs = []
    candidates = [m.group(1) for m in _WINDOW_APP_RE.finditer(html)]
    for script in soup.find_all("script"):
        if script.get("id") == "__NEXT_DATA__" or script.get("type") == "application/json":
            candidates.append(script.string or script.get_text())
    for raw in candidates:
        try:
            blobs.append(json.loads(raw))
        except (json.JSONDecodeError, TypeError) as e:
            logger.debug("Skipping unreadable embedded JSON: %s", e)
    return blobs


def _items_from_cards(soup: BeautifulSoup) -> List[VintedItem]:
    cards = soup.select('[class*="item-card"], [data-testid="grid-item"], [data-testid$="--item"]')
    items = []
    seen = set()
    for card in cards:
        img = card.find("img")
        titled = card if card.get("title") else card.find(attrs={"title": True})
        title = titled.get("title") if titled is not None else None
        if not title and img is not None:
            title = img.get("alt")
        price_match = _CARD_PRICE_RE.search(card.get_text(" ", strip=True))
        image_url = img.get("src") if img is not None else None
        if not title or not price_match or not image_url:
            continue
        price = _valid_price(price_match.group(1))
        if price is None:
            continue
        # Nested "item-card__*" elements match too, keep one entry per card
        key = (title.strip(), image_url)
        if key in seen:
            continue
        seen.add(key)
        items.append(VintedItem(title=title.strip(), price=price, image_url=image_url))
    return items


def extract_items_from_html(html: str) -> List[VintedItem]:
    """
    Items from a profile page: embedded page state first, then item-card
    markup. Anti-bot challenge pages without items raise a BLOCKED error.
    """
    if not html:
        return []
    soup = BeautifulSoup(html, "html.parser")

    for blob in _embedded_json_blobs(html, soup):
        for candidates in _find_item_lists(blob):
            items = parse_api_items(candidates)
            if items:
                return items

    items = _items_from_cards(soup)
    if items:
        return items

    lowered = html.lower()
    if any(marker in lowered for marker in _CHALLENGE_MARKERS):
        raise StrategyError(FailureKind.BLOCKED, "anti-bot challenge page")
    return []


def _check_status(response: httpx.Response) -> None:
    if response.status_code in (401, 403, 429):
        raise StrategyError(FailureKind.BLOCKED, f"HTTP {response.status_code}")
    if response.status_code >= 400:
        raise StrategyError(FailureKind.NETWORK, f"HTTP {response.status_code}")


def _json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise StrategyError(FailureKind.PARSE, f"invalid JSON: {e}")


def _items_field(data: Any) -> List[Any]:
    if not isinstance(data, dict):
        raise StrategyError(FailureKind.PARSE, "unexpected API payload")
    items = data.get("items")
    return items if isinstance(items, list) else []


# =========================
# STRATEGIES
# =========================
class ImportStrategy(ABC):
    name: str = "strategy"

    @abstractmethod
    async def attempt(self, target: ProfileTarget) -> List[VintedItem]:
        ...

    async def run(self, target: ProfileTarget, timeout: float) -> StrategyResult:
        """Run attempt() and fold every failure into a tagged result."""
        try:
            items = await asyncio.wait_for(self.attempt(target), timeout=timeout)
        except asyncio.TimeoutError:
            return StrategyResult(self.name, Outcome.ERROR, kind=FailureKind.NETWORK, detail=f"timed out after {timeout:g}s")
        except StrategyError as e:
            return StrategyResult(self.name, Outcome.ERROR, kind=e.kind, detail=str(e))
        except httpx.TimeoutException as e:
            return StrategyResult(self.name, Outcome.ERROR, kind=FailureKind.NETWORK, detail=f"timeout: {e}")
        except httpx.HTTPError as e:
            return StrategyResult(self.name, Outcome.ERROR, kind=FailureKind.NETWORK, detail=f"{type(e).__name__}: {e}")
        except (ValueError, KeyError, TypeError) as e:
            return StrategyResult(self.name, Outcome.ERROR, kind=FailureKind.PARSE, detail=f"{type(e).__name__}: {e}")
        except Exception as e:
            logger.exception("Import strategy %s crashed", self.name)
            return StrategyResult(self.name, Outcome.ERROR, kind=FailureKind.UNEXPECTED, detail=f"{type(e).__name__}: {e}")

        if items:
            return StrategyResult(self.name, Outcome.SUCCESS, items=list(items))
        return StrategyResult(self.name, Outcome.EMPTY, detail="no items found")


class ApiV2Strategy(ImportStrategy):
    name = "api_v2"

    def __init__(self, client: httpx.AsyncClient, per_page: int = 20):
        self.client = client
        self.per_page = per_page

    async def attempt(self, target: ProfileTarget) -> List[VintedItem]:
        response = await self.client.get(
            f"{target.base_url}/api/v2/users/{target.user_id}/items",
            params={"page": 1, "per_page": self.per_page},
            headers={
                "User-Agent": BROWSER_USER_AGENT,
                "Accept": "application/json, text/plain, */*",
                "Referer": f"{target.base_url}/",
                "X-Requested-With": "XMLHttpRequest",
            },
        )
        _check_status(response)
        return parse_api_items(_items_field(_json(response)))


class ApiV1Strategy(ImportStrategy):
    name = "api_v1"

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def attempt(self, target: ProfileTarget) -> List[VintedItem]:
        response = await self.client.get(
            f"{target.base_url}/api/v1/users/{target.user_id}/items",
            headers={"User-Agent": "VintedMobileApp", "Accept": "application/json"},
        )
        _check_status(response)
        return parse_api_items(_items_field(_json(response)))


class ProfilePageStrategy(ImportStrategy):
    name = "profile_html"

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def attempt(self, target: ProfileTarget) -> List[VintedItem]:
        response = await self.client.get(target.profile_url, headers=HTML_HEADERS)
        _check_status(response)
        return extract_items_from_html(response.text)


class ProxyRelayStrategy(ImportStrategy):
    name = "proxy_relay"

    def __init__(self, client: httpx.AsyncClient, relay_url: str = RELAY_URL):
        self.client = client
        self.relay_url = relay_url

    async def attempt(self, target: ProfileTarget) -> List[VintedItem]:
        response = await self.client.get(self.relay_url, params={"url": target.profile_url})
        _check_status(response)
        data = _json(response)
        if not isinstance(data, dict) or not isinstance(data.get("contents"), str):
            raise StrategyError(FailureKind.PARSE, "relay answer without page contents")
        upstream_status = (data.get("status") or {}).get("http_code")
        if upstream_status in (401, 403, 429):
            raise StrategyError(FailureKind.BLOCKED, f"relayed HTTP {upstream_status}")
        return extract_items_from_html(data["contents"])


class BrowserStrategy(ImportStrategy):
    """Render the profile in headless Chromium (Playwright) and read the DOM."""

    name = "browser"

    def __init__(self, timeout: float = 30.0):
        self.timeout = timeout

    async def attempt(self, target: ProfileTarget) -> List[VintedItem]:
        try:
            from playwright.async_api import async_playwright
        except ImportError:
            raise StrategyError(FailureKind.UNEXPECTED, "Playwright is not installed")

        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(
                headless=True,
                args=["--disable-blink-features=AutomationControlled", "--no-sandbox"],
            )
            try:
                context = await browser.new_context(user_agent=BROWSER_USER_AGENT, locale="fr-FR")
                page = await context.new_page()
                response = await page.goto(
                    target.profile_url, timeout=self.timeout * 1000, wait_until="domcontentloaded"
                )
                if response is not None and response.status in (401, 403, 429):
                    raise StrategyError(FailureKind.BLOCKED, f"HTTP {response.status}")
                html = await page.content()
            finally:
                await browser.close()
        return extract_items_from_html(html)


# =========================
# LADDER
# =========================
class VintedImporter:
    def __init__(
        self,
        strategies: Sequence[ImportStrategy],
        delay: float = 1.0,
        timeout: float = 20.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        default_base_url: Optional[str] = None,
    ):
        self.strategies = list(strategies)
        self.delay = delay
        self.timeout = timeout
        self._sleep = sleep
        self.default_base_url = default_base_url

    async def import_profile(self, profile_url: str) -> ImportOutcome:
        target = build_target(profile_url, self.default_base_url)
        logger.info("Importing Vinted profile %s (member %s)", target.profile_url, target.user_id)
        if not self.strategies:
            logger.warning("Vinted import requested but no import strategy is enabled")
            raise ImportUnavailableError()

        attempts: List[StrategyResult] = []
        for index, strategy in enumerate(self.strategies):
            result = await strategy.run(target, self.timeout)
            attempts.append(result)

            if result.outcome == Outcome.SUCCESS:
                logger.info("Strategy %s returned %d items", strategy.name, len(result.items))
                return ImportOutcome(strategy=strategy.name, items=result.items, attempts=attempts)

            logger.info(
                "Strategy %s gave %s (%s: %s), moving on",
                strategy.name, result.outcome.value, result.kind.value if result.kind else "-", result.detail,
            )
            if index < len(self.strategies) - 1:
                await self._sleep(self.delay)

        logger.warning("Vinted import exhausted for %s after %d strategies", target.profile_url, len(attempts))
        raise ImportExhaustedError(attempts)


def build_strategies(client: httpx.AsyncClient, names: Optional[Sequence[str]] = None) -> List[ImportStrategy]:
    """Instantiate the configured ladder, in configured order."""
    factories: Dict[str, Callable[[], ImportStrategy]] = {
        "api_v2": lambda: ApiV2Strategy(client, per_page=settings.IMPORT_PER_PAGE),
        "api_v1": lambda: ApiV1Strategy(client),
        "profile_html": lambda: ProfilePageStrategy(client),
        "proxy_relay": lambda: ProxyRelayStrategy(client),
        "browser": lambda: BrowserStrategy(timeout=settings.IMPORT_STRATEGY_TIMEOUT),
    }
    strategies = []
    for name in names if names is not None else settings.IMPORT_STRATEGIES:
        if name == "browser" and not settings.IMPORT_BROWSER_ENABLED:
            continue
        factory = factories.get(name)
        if factory is None:
            logger.warning("Unknown import strategy %r ignored", name)
            continue
        strategies.append(factory())
    return strategies


async def get_importer():
    """FastAPI dependency: an importer bound to a shared httpx client."""
    async with httpx.AsyncClient(timeout=settings.IMPORT_STRATEGY_TIMEOUT, follow_redirects=True) as client:
        yield VintedImporter(
            build_strategies(client),
            delay=settings.IMPORT_STRATEGY_DELAY,
            timeout=settings.IMPORT_STRATEGY_TIMEOUT,
            default_base_url=settings.VINTED_BASE_URL,
        )
