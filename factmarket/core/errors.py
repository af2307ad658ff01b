from __future__ import annotations


class FactMarketError(Exception):
    """Base class for deployment failures surfaced to callers."""


class UnsupportedBackend(FactMarketError):
    pass


class NonVouchedOwner(FactMarketError):
    pass


class MissingWallet(FactMarketError):
    pass


class EmptySubmissionResult(FactMarketError):
    """Upload, deploy or dispatch returned no transaction id."""


class GatewayError(FactMarketError):
    """The ledger gateway answered a query with GraphQL errors."""
