"""Digest generation exceptions."""

from __future__ import annotations

from bizdigest.core.types import Domain


class DigestError(Exception):
    """Base exception for digest generation errors."""


class DomainUnavailableError(DigestError):
    """A single domain's data could not be fetched."""

    def __init__(self, domain: Domain, cause: BaseException) -> None:
        super().__init__(f"{domain} unavailable: {cause}")
        self.domain = domain
        self.cause = cause


class DigestGenerationError(DigestError):
    """One or more domains failed; no digest was produced."""

    def __init__(self, failures: dict[Domain, BaseException]) -> None:
        detail = "; ".join(f"{domain}: {exc}" for domain, exc in failures.items())
        super().__init__(f"digest not generated ({detail})")
        self.failures = failures

    @property
    def domains(self) -> list[Domain]:
        return list(self.failures)
