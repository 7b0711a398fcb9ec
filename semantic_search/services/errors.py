class ModelLoadError(RuntimeError):
    """Model artifacts are missing or unusable. The service cannot start."""


class EmbeddingError(RuntimeError):
    """The model runtime failed or returned vectors of the wrong shape."""
