"""Fetching and parsing of YML catalog feeds."""

import logging
import re
from typing import Any, Dict, List, Union

import requests
from bs4 import BeautifulSoup
from bs4.element import Tag

from ..exceptions import EmptyFeedError, RemoteOperationError
from ..models.catalog import CatalogEntry

logger = logging.getLogger(__name__)

OFFERS_PATH = ("yml_catalog", "shop", "offers")

_NUMBER = re.compile(r"^-?(0|[1-9]\d*)(\.\d+)?$")


def coerce_scalar(text: str) -> Union[str, int, float]:
    """Turn numeric tag text into int/float; keep everything else (including ``007``) as text."""
    match = _NUMBER.match(text)
    if not match:
        return text
    return float(text) if match.group(2) else int(text)


def _parse_offer(offer: Tag) -> CatalogEntry:
    fields: Dict[str, Any] = {}
    pictures: List[str] = []
    params = []

    for child in offer.find_all(recursive=False):
        raw_text = child.get_text().strip()
        value = coerce_scalar(raw_text)

        if child.name == "picture":
            pictures.append(raw_text)
        elif child.name == "param":
            params.append((str(child.get("name", "")), value))

        if child.name in fields:
            existing = fields[child.name]
            if isinstance(existing, list):
                existing.append(value)
            else:
                fields[child.name] = [existing, value]
        else:
            fields[child.name] = value

    return CatalogEntry(
        fields=fields,
        attributes={key: str(val) for key, val in offer.attrs.items()},
        pictures=tuple(pictures),
        params=tuple(params),
    )


def parse_offers(content: Union[str, bytes]) -> List[CatalogEntry]:
    """
    Parse a YML document and return its offers.

    Args:
        content: Raw XML document

    Returns:
        List of offers, in document order

    Raises:
        EmptyFeedError: If ``yml_catalog/shop/offers/offer`` has no elements
    """
    soup = BeautifulSoup(content, "xml")

    node = soup
    for name in OFFERS_PATH:
        node = node.find(name, recursive=False) if node is not None else None

    offers = node.find_all("offer", recursive=False) if node is not None else []
    if not offers:
        raise EmptyFeedError("No offers found in feed")

    return [_parse_offer(offer) for offer in offers]


def fetch_offers(feed_url: str, timeout: float = 60.0) -> List[CatalogEntry]:
    """
    Download the feed and parse its offers.

    Raises:
        RemoteOperationError: If the HTTP request fails or returns an error status
        EmptyFeedError: If the feed has no offers
    """
    try:
        response = requests.get(feed_url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.HTTPError as e:
        response = e.response
        raise RemoteOperationError(
            f"Feed request failed: {e}",
            status_code=response.status_code if response is not None else None,
            body=response.text if response is not None else None,
        ) from e
    except requests.exceptions.RequestException as e:
        raise RemoteOperationError(f"Feed request failed: {e}") from e

    offers = parse_offers(response.content)
    logger.info(f"📥 Extracted {len(offers)} offers from {feed_url}")
    return offers
