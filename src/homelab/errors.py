"""Failure taxonomy for the fetch-and-cache layer.

Routes map these onto HTTP status codes: ``InvalidInput`` -> 400,
``NotFound`` -> 404, ``UpstreamUnavailable`` (and its subclasses) -> 502.
"""

from __future__ import annotations


class HomelabError(Exception):
    pass


class InvalidInput(HomelabError):
    pass


class NotFound(HomelabError):
    pass


class UpstreamUnavailable(HomelabError):
    pass


class FetchTimeout(UpstreamUnavailable):
    pass


class FetchNetworkError(UpstreamUnavailable):
    pass


class UpstreamStatusError(UpstreamUnavailable):
    def __init__(self, url: str, status_code: int):
        super().__init__(f"{url} returned HTTP {status_code}")
        self.url = url
        self.status_code = status_code


class ParseFailure(UpstreamUnavailable):
    pass
