# ABOUTME: Exception taxonomy for WFO processing and dispatch.
# ABOUTME: Per-unit errors become skip/fail outcomes; only InfrastructureError fails a run.


class DispatchError(Exception):
    """Base class for all dispatch-related errors."""


class NoDataError(DispatchError):
    """The source has no product for this WFO (or the fetch errored)."""


class NotStaleError(DispatchError):
    """The fetched product is not newer than the stored watermark."""


class GenerationFailure(DispatchError):
    """Text or speech generation returned nothing usable."""


class PublishFailure(DispatchError):
    """The audio artifact could not be written to the content store."""


class ConfigurationError(DispatchError):
    """A required per-run parameter (e.g. an API key) is missing."""


class InfrastructureError(DispatchError):
    """The set of WFOs could not be determined at all."""


class InactiveStrategyError(DispatchError):
    """The requested dispatcher belongs to the dispatch strategy that is not deployed."""
