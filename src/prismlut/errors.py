"""Custom exception hierarchy for Prism."""


class PrismError(Exception):
    """Base exception for all Prism errors."""


class ValidationError(PrismError):
    """Input validation failures."""


class EmptyInputError(PrismError):
    """A LUT has no samples, or a required image is missing."""


class LUTMismatchError(PrismError):
    """Two LUTs cannot be combined because their levels differ."""


class ImageError(PrismError):
    """Errors related to image loading or processing."""


class ImageFormatError(ImageError):
    """Unsupported or corrupted image format."""


class ImageDimensionError(ImageError):
    """Image dimensions exceed limits or do not match the Hald layout."""


class LUTFormatError(PrismError):
    """Invalid or corrupted LUT file format."""


class UnrecognizedLineError(LUTFormatError):
    """A .cube line matches no known keyword or sample row."""

    def __init__(self, line_no: int, line: str):
        super().__init__(f"Unrecognised line {line_no}: {line!r}")
        self.line_no = line_no
        self.line = line


class MalformedFieldError(LUTFormatError):
    """A known .cube keyword or sample row carries unparseable values."""

    def __init__(self, line_no: int, message: str):
        super().__init__(f"Line {line_no}: {message}")
        self.line_no = line_no
