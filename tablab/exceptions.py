"""Error taxonomy shared by all tablab components."""


class TablabError(Exception):
    """Base class for errors raised by tablab."""


class ValidationError(TablabError, ValueError):
    """A user-supplied selection or parameter cannot be used.

    Raised for missing target/feature selections, invalid column names in the
    ML harness, non-numeric prediction input and out-of-range hyperparameters.
    The message is meant to be shown to the user as-is.
    """


__all__ = ["TablabError", "ValidationError"]
