"""Exceptions raised while encoding, decoding and fragmenting bundles."""


class SerializationError(Exception):
    """Raised when a value cannot be encoded to or decoded from CBOR."""


class FragmentationError(Exception):
    """Base class for errors raised while fragmenting a bundle."""


class FragmentTooSmallError(FragmentationError):
    """Raised when the requested fragment size cannot hold the mandatory blocks."""

    def __init__(self, min_size):
        super().__init__(f"cannot fragment into bundles smaller than {min_size} bytes")
        self.min_size = min_size


class MustNotFragmentError(FragmentationError):
    """Raised when a bundle flagged as must-not-fragment is to be fragmented."""


class BundleInvalidError(FragmentationError):
    """Raised when a fragment lacks its fragment offset or total data length."""