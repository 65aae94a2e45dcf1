"""Scraper package: page fetch & markup normalisation."""

from lickui.scraper.fetcher import fetch_stylesheets, fetch_url
from lickui.scraper.models import FetchResult, NormalizedMarkup, NormalizedPage
from lickui.scraper.normalizer import normalize

__all__ = [
    "fetch_url",
    "fetch_stylesheets",
    "normalize",
    "FetchResult",
    "NormalizedMarkup",
    "NormalizedPage",
]
