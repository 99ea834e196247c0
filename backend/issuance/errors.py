class IssuanceError(Exception):
    """Base class for all errors raised by the issuance adapter."""


class DataUnavailable(IssuanceError):
    """A historical balance, total supply or price could not be retrieved."""


class ConfigurationError(IssuanceError, ValueError):
    """Token or network configuration is inconsistent or malformed."""


class DivisionByZero(IssuanceError, ZeroDivisionError):
    """Prior-period supply is zero, so a relative rate is undefined."""
