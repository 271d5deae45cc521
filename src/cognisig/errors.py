"""Exceptions raised by the cognitive signature kernel."""


class CognisigError(Exception):
    """Base class for all kernel errors."""


class InvalidInputError(CognisigError, ValueError):
    """Empty shape, non-positive dimension or negative integer (strict mode only)."""


class NodeExistsError(CognisigError, KeyError):
    """A fresh node id was requested but the id is already registered."""


class UnknownNodeError(CognisigError, KeyError):
    """The node id is not registered in the graph."""
