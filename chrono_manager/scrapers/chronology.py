"""Fetcher for the published chronology pages."""

from typing import Callable, Iterable, Optional

import aiohttp

from ..constants.calendar import ARC_INDICES
from ..constants.config import CHRONO_BASE_URL, CHRONOLOGY_PAGE_PATH, PAGE_ENCODING
from ..models.entry import RawEntry
from ..parsers.markup import parse_chronology_page


class ChronologyFetchError(Exception):
    """Raised when a chronology page cannot be fetched."""


def chronology_page_url(arc: int, base_url: str = CHRONO_BASE_URL) -> str:
    return base_url + CHRONOLOGY_PAGE_PATH.format(arc=arc)


async def fetch_chronology_page(
    session: aiohttp.ClientSession,
    arc: int,
    base_url: str = CHRONO_BASE_URL,
) -> str:
    """
    Fetch the chronology page of one arc.
    
    Args:
        session: aiohttp session
        arc: Arc index of the page
        base_url: Site root
        
    Returns:
        Page body decoded from the site's legacy encoding
        
    Raises:
        ChronologyFetchError: On a non-200 response
        UnicodeDecodeError: If the body is not valid in the page encoding
    """
    url = chronology_page_url(arc, base_url)
    async with session.get(url) as response:
        if response.status != 200:
            raise ChronologyFetchError(f"Failed to fetch {url}: {response.status}")
        body = await response.read()
    return body.decode(PAGE_ENCODING)


async def scrape_chronology(
    arcs: Iterable[int] = ARC_INDICES,
    base_url: str = CHRONO_BASE_URL,
    on_page_scraped: Optional[Callable[[int, list[RawEntry]], None]] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> list[RawEntry]:
    """
    Fetch and parse the chronology pages one after another.
    
    All pages go through a single connection. Any failure aborts the scrape.
    
    Args:
        arcs: Arc indices of the pages to read
        base_url: Site root
        on_page_scraped: Callback with the arc and its entries after each page
        session: Session to reuse; a single-connection session is opened if None
        
    Returns:
        Raw entries in page order, then line order
    """
    if session is None:
        connector = aiohttp.TCPConnector(limit=1)
        async with aiohttp.ClientSession(connector=connector) as own_session:
            return await scrape_chronology(arcs, base_url, on_page_scraped, own_session)
    
    raw_entries: list[RawEntry] = []
    
    for arc in arcs:
        body = await fetch_chronology_page(session, arc, base_url)
        page_entries = parse_chronology_page(body, arc)
        raw_entries.extend(page_entries)
        
        if on_page_scraped:
            on_page_scraped(arc, page_entries)
    
    return raw_entries

