"""
Recursive, depth-bounded scan of an open directory listing.

scan() fetches a listing, walks its entries in document order, recurses into
subdirectories until max_depth and folds everything into one NodeReport.
Traversal is depth-first and sequential: a subdirectory is fully scanned
(including its NSFW checks) before the next sibling entry is looked at.
"""

import urllib.parse

from .exceptions import ClassificationError, ScanError
from .filetypes import DIRECTORY, Category, classify_leaf
from .report import FileRecord, NodeReport, merge
from .sizes import parse_size

SKIPPED_HREFS = ('../', '..', '/')


def is_skipped_href(href):
    """Parent, self and query-only links are not entries"""
    return href in SKIPPED_HREFS or href.startswith('?')


def _listing_base(listing_url):
    return listing_url if listing_url.endswith('/') else listing_url + '/'


def resolve_url(listing_url, href):
    """Absolute URL of an href found on listing_url"""
    return urllib.parse.urljoin(_listing_base(listing_url), href)


def is_below(listing_url, entry_url):
    """Check if entry_url lies under listing_url (parent links resolve above it)"""
    return entry_url.startswith(_listing_base(listing_url))


class Scanner:
    def __init__(self, fetcher, extractor, detector=None, cancel_event=None, progress=None):
        self.fetcher = fetcher
        self.extractor = extractor
        self.detector = detector
        self.cancel_event = cancel_event
        self.progress = progress

    @property
    def cancelled(self):
        return self.cancel_event is not None and self.cancel_event.is_set()

    def scan(self, url, depth=0, max_depth=3):
        """Scan url and everything below it down to max_depth.

        Returns (report, records) where records lists every discovered entry,
        directories included, in depth-first order with a directory's own
        record following the records of its contents. A failure fetching url
        itself propagates as FetchError; failures below it are logged and
        recorded in report.failures.
        """
        if depth > max_depth:
            return NodeReport(), []

        print(f"[*] Scanning directory: {url} (depth: {depth})")

        body = self.fetcher.get(url)
        entries = self.extractor.extract(body)

        report = NodeReport()
        records = []

        for entry in entries:
            if self.cancelled:
                break

            href = entry.href
            if is_skipped_href(href):
                continue

            entry_url = resolve_url(url, href)
            name = href.rstrip('/')

            if href.endswith('/'):
                # Root-relative parent links ("/files/") would re-scan an ancestor
                if not is_below(url, entry_url):
                    continue
                report.add_directory()
                if depth < max_depth:
                    self._scan_subdirectory(entry_url, depth, max_depth, report, records)
                records.append(FileRecord(name, entry_url, 0, DIRECTORY))
            else:
                record = self._scan_file(name, entry_url, entry.size_text, report)
                report.add_file(record)
                records.append(record)

            if self.progress is not None:
                self.progress.update(1)

        return report, records

    def _scan_subdirectory(self, url, depth, max_depth, report, records):
        try:
            child_report, child_records = self.scan(url, depth + 1, max_depth)
        except ScanError as e:
            print(f"[!] Error scanning subdirectory {url}: {e}")
            report.add_failure(e)
            return

        report.consider_subdirectory(url, child_report)
        merge(report, child_report)
        records.extend(child_records)

    def _scan_file(self, name, url, size_text, report):
        size = parse_size(size_text) if size_text else 0
        file_type = classify_leaf(name)

        is_explicit = None
        if file_type.category is Category.IMAGE and self.detector is not None:
            try:
                is_explicit = self.detector.check(url)
            except ClassificationError as e:
                print(f"[!] {e}")
                report.add_failure(e)

        return FileRecord(name, url, size, file_type, is_explicit)
