"""Exception taxonomy shared by the services and translated by the routers.

``InvalidInput`` subclasses ``ValueError`` and ``TransportFailure`` subclasses
``RuntimeError`` so callers that only know the builtin types keep working.
"""


class AIOneError(Exception):
    """Base class for every error raised by the aione services."""


# ---------------------------------------------------------------------------
# Bad input: reported immediately, never retried
# ---------------------------------------------------------------------------

class InvalidInput(AIOneError, ValueError):
    pass


class InvalidURL(InvalidInput):
    pass


class EmptySelection(InvalidInput):
    pass


class EmptyName(InvalidInput):
    pass


class NoFiles(InvalidInput):
    pass


class UnsupportedFormat(InvalidInput):
    pass


# ---------------------------------------------------------------------------
# Network failures
# ---------------------------------------------------------------------------

class TransportFailure(AIOneError, RuntimeError):
    pass


class FetchFailure(TransportFailure):
    """Every configured proxy failed for the requested URL."""


# ---------------------------------------------------------------------------
# Nothing to work with
# ---------------------------------------------------------------------------

class EmptyResult(AIOneError):
    pass


class NoElements(EmptyResult):
    pass


class EmptyData(EmptyResult):
    pass


class ExtractionNotFound(EmptyResult):
    """No stored extraction exists for the requested URL."""


class SessionNotFound(EmptyResult):
    """No chatbot training data or model exists for the requested id."""


# ---------------------------------------------------------------------------
# Auth backend
# ---------------------------------------------------------------------------

class AuthError(AIOneError):
    pass


class BackendNotConfigured(AuthError):
    pass


class AuthFailure(AuthError):
    pass
