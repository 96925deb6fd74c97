"""Exceptions raised by the SE codecs."""


class FormatError(ValueError):
    """Raised when a stream does not start with the expected magic."""

    def __init__(self, expected: bytes, found: bytes):
        self.expected = expected
        self.found = found
        super().__init__(
            f"Not a {expected.decode('ascii')} file (magic {found!r})"
        )
