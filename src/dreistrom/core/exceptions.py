"""Custom exceptions for the dreistrom tax engine.

Four families, each catchable on its own:
  ConfigurationError — bad or missing input data (year table, ratios, config.json)
  DomainRuleError    — an operation the domain forbids (e.g. double disposal)
  ConcurrencyError   — contention on the invoice counter, safe to retry
  AssetNotFoundError — data-layer lookup misses
"""


class DreiStromError(Exception):
    """Base exception."""
    pass


class ConfigurationError(DreiStromError):
    pass


class MissingTaxYearError(ConfigurationError):
    def __init__(self, year: int):
        super().__init__(f"No tax parameters configured for year {year}")
        self.year = year


class InvalidAllocationError(ConfigurationError):
    pass


class InvalidUsefulLifeError(ConfigurationError):
    pass


class DomainRuleError(DreiStromError):
    pass


class AssetAlreadyDisposedError(DomainRuleError):
    pass


class DisposalBeforeAcquisitionError(DomainRuleError):
    pass


class UnsupportedStreamError(DomainRuleError):
    pass


class ConcurrencyError(DreiStromError):
    retryable = True


class SequenceLockError(ConcurrencyError):
    pass


class AssetNotFoundError(DreiStromError):
    pass
