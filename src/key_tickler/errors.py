class KeyTicklerError(Exception):
    """Base class for all key_tickler errors."""


class InvalidInput(KeyTicklerError, ValueError):
    """Bad search parameters, detected before any trial runs."""


class BackendError(KeyTicklerError, RuntimeError):
    """The compute backend could not execute a trial."""


class SearchEngineFailure(BackendError):
    """A trial failed inside the cipher engine and the search was aborted."""


class SearchCancelled(KeyTicklerError):
    pass
