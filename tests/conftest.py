"""
Shared fakes for scanner tests.

FakeFetcher serves pre-built "bodies" per URL and FakeExtractor returns them
unchanged, so a listing can be described directly as a list of
ListingEntry values.
"""

import pytest

from openscan.exceptions import ClassificationError, FetchError
from openscan.listing import ListingEntry


class FakeFetcher:
    def __init__(self, pages):
        self.pages = pages
        self.requested = []

    def get(self, url):
        self.requested.append(url)
        page = self.pages.get(url)
        if page is None:
            raise FetchError(url, "HTTP 404", status=404)
        if isinstance(page, Exception):
            raise page
        return page


class FakeExtractor:
    def extract(self, body):
        return list(body)


class FakeDetector:
    def __init__(self, verdicts=None):
        self.verdicts = verdicts or {}
        self.checked = []

    def check(self, image_url):
        self.checked.append(image_url)
        verdict = self.verdicts.get(image_url, False)
        if isinstance(verdict, Exception):
            raise verdict
        return verdict


def entries(*items):
    """entries('a.png', ('b.txt', '10K'), 'sub/') -> [ListingEntry, ...]"""
    result = []
    for item in items:
        if isinstance(item, tuple):
            result.append(ListingEntry(*item))
        else:
            result.append(ListingEntry(item))
    return result


@pytest.fixture
def gate_failure():
    def make(url):
        return ClassificationError(url, "could not decode image")
    return make
