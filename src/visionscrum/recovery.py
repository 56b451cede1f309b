class VisionScrumError(Exception):
    """Base exception for all VisionScrum errors."""
    pass

class RecoverableError(VisionScrumError):
    """An error that can be recovered from without data loss."""
    pass

class FatalError(VisionScrumError):
    """An error that requires application termination or major intervention."""
    pass

class CorruptionError(FatalError):
    """Corrupted Data Error - from syntax errors in stored JSON, to projects that break the board invariants"""
    pass

class FileOperationError(RecoverableError):
    """File operation failed but can be retried."""
    pass

class ProjectNotFoundError(RecoverableError):
    """No stored project matches the requested id."""
    pass

class IngestionError(RecoverableError):
    """ The image analysis failed or produced a draft we cannot turn into a project """
    pass
