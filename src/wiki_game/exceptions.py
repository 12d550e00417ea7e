"""
Custom exceptions for the wiki_game package.
"""

class WikiGameException(Exception):
    """Base exception for the package."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class FetchError(WikiGameException):
    """Raised when a document body cannot be retrieved (network error, timeout, bad status)."""
    def __init__(self, message: str, url: str = ""):
        self.url = url
        super().__init__(message)

class ParseError(WikiGameException):
    """Raised when links cannot be extracted from a document body."""
    pass

class StoreError(WikiGameException):
    """Raised when the memo store cannot be read or written."""
    pass

class QueueError(WikiGameException):
    """Raised when the work queue rejects a send, receive or acknowledgement."""
    pass

class PublishError(WikiGameException):
    """Raised when a notification cannot be published."""
    pass

class ConfigurationError(WikiGameException):
    """Raised when a selected backend is missing required settings."""
    pass
