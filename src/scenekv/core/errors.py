from __future__ import annotations


class SceneKVError(Exception):
    """Base class for errors raised by scenekv."""


class DecodeError(SceneKVError, ValueError):
    """A stored JSON document is missing a required field or has the wrong shape."""


class StoreUnavailableError(SceneKVError, RuntimeError):
    """The key-value store could not be reached or rejected a request.

    The registry does not retry; callers decide whether to back off and try again.
    """


class StoreCommandError(SceneKVError, RuntimeError):
    """The store rejected a single command, e.g. a set operation on a string key."""
