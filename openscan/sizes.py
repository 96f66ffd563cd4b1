"""
Size-column parsing for directory listings.

Listing servers render the size column in many ways ("1234", "1.5K", "2M",
"-", "Directory"). parse_size() turns any of them into a byte count and never
fails.
"""

import re

UNIT_MULTIPLIERS = {
    'K': 1024,
    'M': 1024 ** 2,
    'G': 1024 ** 3,
    'T': 1024 ** 4,
}

_EMPTY_TOKENS = ('', '-', 'Directory')
_NUMERIC_RUN = re.compile(r'[0-9.]*')
_SIZE_CELL = re.compile(r'^(?:-|\d+(?:\.\d+)?\s*[KMGTkmgt]?)$')


def _is_plain_integer(text):
    return text.isascii() and text.isdigit()


def parse_size(text):
    """Parse a human-readable size token into bytes"""
    if text is None:
        return 0

    text = text.strip()
    if text in _EMPTY_TOKENS:
        return 0

    if _is_plain_integer(text):
        return int(text)

    number_part = _NUMERIC_RUN.match(text).group(0)
    suffix = text[len(number_part):].strip().upper()

    try:
        number = float(number_part)
    except ValueError:
        number = 0.0

    return int(number * UNIT_MULTIPLIERS.get(suffix, 1))


def looks_like_size(text):
    """Check if a listing cell holds a size value"""
    if text is None:
        return False
    return bool(_SIZE_CELL.match(text.strip()))


def format_bytes(bytes_size):
    """Format bytes to human readable format"""
    bytes_size = float(bytes_size)
    for unit in ['B', 'KB', 'MB', 'GB']:
        if bytes_size < 1024.0:
            return f"{bytes_size:.1f} {unit}"
        bytes_size /= 1024.0
    return f"{bytes_size:.1f} TB"
