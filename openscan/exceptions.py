"""
Error taxonomy for the scanner and its collaborators.
"""


class ScanError(Exception):
    """Base class for scan failures"""


class FetchError(ScanError):
    """A listing page (or image) could not be fetched"""

    def __init__(self, url, reason, status=None):
        self.url = url
        self.reason = reason
        self.status = status
        super().__init__(f"Failed to fetch {url}: {reason}")


class ClassificationError(ScanError):
    """The NSFW gate could not produce a verdict for an image"""

    def __init__(self, url, reason):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to check NSFW for {url}: {reason}")


class ConfigError(Exception):
    """Invalid configuration file or value"""
