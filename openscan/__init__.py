"""
OpenScan - recursive open directory scanner.
"""

from .exceptions import ClassificationError, ConfigError, FetchError, ScanError
from .filetypes import DIRECTORY, Category, FileType, classify
from .report import FileRecord, NodeReport, merge
from .scanner import Scanner
from .sizes import parse_size

__version__ = '1.0.0'
