"""
Exceptions raised by linkcanon.
"""


class InvalidUrlError(ValueError):
    """
    Raised when a string cannot be parsed as an absolute URL.

    Attributes
    ----------
    url : object
        The original input, kept verbatim for diagnostics.
    reason : str
        Short description of why parsing failed.
    """

    def __init__(self, url: object, reason: str = "") -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid URL: {url}")
