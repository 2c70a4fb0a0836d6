class InvalidArgumentError(ValueError):
    """
    Raised when an argument is outside of the range an op or layer
    accepts, e.g. a keep probability that is not in (0, 1].
    """
