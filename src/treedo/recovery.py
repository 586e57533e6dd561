class TreedoError(Exception):
    """Base exception for all treedo errors."""
    pass

class RecoverableError(TreedoError):
    """An error the interactive loop survives; state is left unchanged."""
    pass

class FatalError(TreedoError):
    """An error that requires application termination."""
    pass

class CorruptionError(FatalError):
    """Store file is unreadable, from YAML syntax errors to data failing validation."""
    pass

class StoreInitError(FatalError):
    """The store could not be opened or created."""
    pass

class SchemaVersionError(FatalError):
    """Store file was written by a newer schema than this build understands."""
    pass

class FileOperationError(RecoverableError):
    """File operation failed but can be retried."""
    pass

class StoreOperationError(RecoverableError):
    """A store mutation was rejected (unknown id, invalid move)."""
    pass

class CommandError(RecoverableError):
    """Malformed command arguments. The message is shown to the user as-is."""
    pass

class EnrichmentError(RecoverableError):
    """External enrichment (weather) could not be fetched or parsed."""
    pass
