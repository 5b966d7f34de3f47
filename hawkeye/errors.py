"""Error kinds raised by the engine and its collaborators."""

from __future__ import annotations


class HawkEyeError(Exception):
    """Base class for all HawkEye errors."""


class MissingCredential(HawkEyeError):
    """No Torn API key is configured, so history cannot be refreshed."""

    def __init__(self, message: str = "Missing Torn API key. Set it with `hawkeye key`.") -> None:
        super().__init__(message)


class FetchFailure(HawkEyeError):
    """Network, API or decoding error while talking to an external source."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: {reason}")


class ParseFailure(HawkEyeError):
    """Scraped text could not be interpreted (level, activity, price...)."""

    def __init__(self, field: str, text: str) -> None:
        self.field = field
        self.text = text
        super().__init__(f"Cannot parse {field} from {text!r}")
