"""HTTP session setup with an in-memory cache for single-page fetches."""
from urllib.parse import urlparse

import requests
import requests_cache


def setup_cache(api_base: str, enabled: bool = True) -> requests.Session:
    """Set up the session used for acquisition service calls.

    Only successful ``/scrape`` POSTs are cached, and only for the lifetime of
    the session, so a page listed twice in one crawl is fetched once. Crawl
    submission and status polling always hit the network.

    Args:
        api_base: Base URL of the acquisition service API
        enabled: Return a plain session when False

    Returns:
        requests.Session or requests_cache.CachedSession
    """
    if not enabled:
        return requests.Session()

    parsed = urlparse(api_base)
    scrape_pattern = f"{parsed.netloc}{parsed.path.rstrip('/')}/scrape"
    session = requests_cache.CachedSession(
        "trial_scraper",
        backend="memory",
        expire_after=requests_cache.DO_NOT_CACHE,
        urls_expire_after={scrape_pattern: requests_cache.NEVER_EXPIRE},
        allowable_codes=[200],
        allowable_methods=["POST"],
    )
    return session
