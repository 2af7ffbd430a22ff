class ConfigurationError(Exception):
    """ Raised when a network or layer is constructed or configured with
    parameters that can never work (e.g., fewer than two layer sizes or a
    dropout rate vector of the wrong length)
    """
