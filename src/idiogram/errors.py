"""Exception taxonomy for the idiogram engine."""


class IdiogramError(Exception):
    """Base class for every error raised by the idiogram engine."""


class MalformedInput(IdiogramError, ValueError):
    """Raw band rows cannot be turned into a consistent Genome."""


class UnknownChromosome(IdiogramError, KeyError):
    """A chromosome name does not exist in the Genome."""

    def __init__(self, name: object):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown chromosome: {self.name!r}"


class UnknownBand(IdiogramError, KeyError):
    """A band name does not exist on the given chromosome."""

    def __init__(self, chromosome: str, band: object):
        super().__init__(chromosome, band)
        self.chromosome = chromosome
        self.band = band

    def __str__(self) -> str:
        return f"Band {self.band!r} does not exist in chromosome {self.chromosome!r}"


class InvalidArguments(IdiogramError, TypeError):
    """A public operation was called with an unsupported argument shape."""


class NotRendered(IdiogramError, RuntimeError):
    """An operation needs the Genome but the idiogram has not been rendered yet."""
