"""Locate and decode the ytInitialData document embedded in a YouTube page."""

import json

from bs4 import BeautifulSoup

from tubescrape.exceptions import EmbeddedDataNotFound

MARKER = "ytInitialData"

_decoder = json.JSONDecoder()


def parse_embedded_data(html: str | BeautifulSoup) -> dict:
    """Return the ytInitialData document of a page.

    Only the first <script> mentioning the marker is considered. Its text from
    the first "{" is decoded as one JSON value; anything after the value (the
    ";" ending the assignment, other statements) is ignored.
    """
    soup = html if isinstance(html, BeautifulSoup) else BeautifulSoup(html, "html.parser")
    for script in soup.find_all("script"):
        text = script.string or script.get_text()
        if not text or MARKER not in text:
            continue
        start = text.find("{")
        if start == -1:
            raise EmbeddedDataNotFound(f"{MARKER} script has no JSON object")
        try:
            data, _ = _decoder.raw_decode(text, start)
        except json.JSONDecodeError as e:
            raise EmbeddedDataNotFound(f"Malformed {MARKER} JSON: {e}") from e
        if not isinstance(data, dict):
            raise EmbeddedDataNotFound(f"{MARKER} is not a JSON object")
        return data
    raise EmbeddedDataNotFound(f"No {MARKER} found in page")
