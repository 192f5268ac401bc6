# src/models/errors.py

"""Exception hierarchy for rate fetching and conversion."""


class CurrencyFlowError(Exception):
    """Base class for every error raised by currency_flow."""


class NetworkError(CurrencyFlowError):
    """The rate provider could not be reached or returned bad data.

    Covers transport failures, timeouts, non-success HTTP statuses and
    payloads that do not parse into the expected shape.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidAmount(CurrencyFlowError):
    """The amount is non-numeric, non-finite, or not strictly positive."""


class RateUnavailable(CurrencyFlowError):
    """The requested rate is not present in the current snapshot."""

    def __init__(self, from_code: str, to_code: str) -> None:
        super().__init__(f"No {from_code}->{to_code} rate in current snapshot")
        self.from_code = from_code
        self.to_code = to_code
