class PortalError(Exception):
    """ Generic software portal error. All classes here belong to this. """


class DescriptorParseError(PortalError):
    """The release descriptor file cannot be read or parsed as a whole."""

    def __init__(self, path, message):
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message
