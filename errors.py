class HuffFormatError(ValueError):
    """Compressed input does not follow the huffpack format."""


class BadMagicError(HuffFormatError):
    """The leading 32 bits are missing or are not the huffpack magic number."""


class TruncatedHeaderError(HuffFormatError):
    """The input ended while the tree header was being read."""


class TruncatedPayloadError(HuffFormatError):
    """The input ended before the end-of-stream code was decoded."""
