"""Error kinds raised by the ingestion and answering pipelines.

Every core operation either returns a fully populated result or raises one
of these. ``transient`` marks failures worth a single retry (network blips,
timeouts, overloaded model server); everything else is surfaced as-is.
"""


class DocQAError(Exception):
    """Base class for all pipeline failures."""

    transient = False


class ExtractionError(DocQAError):
    """The document could not be parsed or contained no text."""


class EmbeddingError(DocQAError):
    """The embedding model failed or returned unusable vectors."""

    def __init__(self, message: str, transient: bool = False):
        super().__init__(message)
        self.transient = transient


class VectorIndexError(DocQAError):
    """Vector index misuse: dimension mismatch or index not open."""


class GenerationError(DocQAError):
    """The generative model failed or refused to answer."""

    def __init__(self, message: str, transient: bool = False):
        super().__init__(message)
        self.transient = transient
