"""Exception types raised by mindvault."""


class ThoughtValidationError(ValueError):
    """Thought content was rejected before any analysis ran."""


class ClusterAdjustmentError(ValueError):
    """A manual cluster adjustment would break the cluster hierarchy."""


class StoreError(RuntimeError):
    """The thought store could not be read or written."""
