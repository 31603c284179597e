"""Exceptions raised while building game metadata."""

from __future__ import annotations


class MetadataError(Exception):
    """Base class for metadata resolution failures."""


class InvalidCatalogIdError(MetadataError):
    """The catalog id is not a digit-only string."""


class UpstreamUnavailableError(MetadataError):
    """IGDB could not be reached or rejected the credentials."""


class CandidateNotFoundError(MetadataError):
    """IGDB returned no game for the requested id."""


__all__ = [
    "CandidateNotFoundError",
    "InvalidCatalogIdError",
    "MetadataError",
    "UpstreamUnavailableError",
]
