"""
Link extraction for directory listing pages.

Every anchor is returned in document order; the scanner decides which ones to
follow. Size text is recovered from the markup of the common listing
generators where possible.
"""

from typing import NamedTuple, Optional

from bs4 import BeautifulSoup, NavigableString

from .sizes import looks_like_size

SIZE_CELL_CLASSES = ('indexcolsize', 'size', 'filesize')
LINE_BREAKERS = ('a', 'br')

# First match wins; every marker must appear in the lower-cased page
SERVER_MARKERS = (
    ('apache', ('index of', 'apache')),
    ('python', ('directory listing for',)),
    ('nginx', ('<h1>index of',)),
    ('nginx', ('autoindex',)),
    ('iis', ('[to parent directory]',)),
)


class ListingEntry(NamedTuple):
    href: str
    size_text: Optional[str] = None


def _decode(body):
    if isinstance(body, bytes):
        return body.decode('utf-8', errors='replace')
    return body


def detect_server_type(body):
    """Guess which server software generated a listing page"""
    content = _decode(body).lower()
    for server, markers in SERVER_MARKERS:
        if all(marker in content for marker in markers):
            return server
    return 'unknown'


def _size_from_row(link, row):
    cells = row.find_all(['td', 'th'])

    for cell in cells:
        classes = cell.get('class') or []
        if any(name in classes for name in SIZE_CELL_CLASSES):
            return cell.get_text().strip()

    link_cell = link.find_parent(['td', 'th'])
    after_link = False
    for cell in cells:
        if cell is link_cell:
            after_link = True
            continue
        if after_link:
            text = cell.get_text().strip()
            if looks_like_size(text):
                return text
    return None


def _last_size_token(text):
    for token in reversed(text.split()):
        if looks_like_size(token):
            return token
    return None


def _line_after(link):
    parts = []
    for sibling in link.next_siblings:
        if not isinstance(sibling, NavigableString):
            if sibling.name in LINE_BREAKERS:
                break
            continue
        text = str(sibling)
        if '\n' in text:
            parts.append(text.split('\n', 1)[0])
            break
        parts.append(text)
    return ''.join(parts)


def _line_before(link):
    parts = []
    for sibling in link.previous_siblings:
        if not isinstance(sibling, NavigableString):
            if sibling.name in LINE_BREAKERS:
                break
            continue
        text = str(sibling)
        if '\n' in text:
            parts.append(text.rsplit('\n', 1)[1])
            break
        parts.append(text)
    return ''.join(reversed(parts))


def _size_from_pre(link):
    # Apache/nginx put "date time size" after the name, IIS puts it before
    after = _line_after(link)
    if after.strip():
        return _last_size_token(after)
    before = _line_before(link)
    if before.strip():
        return _last_size_token(before)
    return None


def find_size_text(link):
    """Best-effort size text for an anchor in a listing"""
    row = link.find_parent('tr')
    if row is not None:
        return _size_from_row(link, row)

    if link.find_parent('pre') is not None:
        return _size_from_pre(link)

    return None


def extract_entries(body):
    """Return every anchor of a listing page as ListingEntry, in document order"""
    soup = BeautifulSoup(_decode(body), 'html.parser')

    entries = []
    for link in soup.find_all('a', href=True):
        href = link.get('href').strip()
        if not href:
            continue
        entries.append(ListingEntry(href, find_size_text(link)))
    return entries


class LinkExtractor:
    def __init__(self, verbose=True):
        self.verbose = verbose

    def extract(self, body):
        if self.verbose:
            print(f"[*] Detected server type: {detect_server_type(body)}")
        return extract_entries(body)
