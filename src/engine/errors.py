"""
Errors raised while resolving team references.

"Not resolvable yet" is not an error: resolvers return None for it.
"""


class ResolutionError(Exception):
    """Base class for reference resolution failures."""


class MalformedReferenceError(ResolutionError, ValueError):
    """A reference string does not match any known reference shape."""

    def __init__(self, reference, reason=None):
        self.reference = reference
        message = f"Malformed reference {reference!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class UnknownReferenceError(ResolutionError, KeyError):
    """A reference names a group, match, team or position that does not exist."""

    def __init__(self, reference, reason=None):
        self.reference = reference
        self.reason = reason
        super().__init__(reference)

    def __str__(self):
        message = f"Unknown reference {self.reference!r}"
        if self.reason:
            message += f": {self.reason}"
        return message
