"""SDK exceptions.

Not-found and wrong-state conditions are raised as plain ``ValueError`` with
a descriptive message (the server maps message patterns to HTTP status
codes).  Only conditions that need a distinct recovery path get a class here.
"""


class CollaboratorUnavailableError(RuntimeError):
    """The language service could not be reached or timed out.

    Retryable.  The current turn is not committed.
    """
