import tempfile, yaml, os
from typing import Union, Dict, Any, Optional
from pathlib import Path

from packaging import version
from pydantic import ValidationError

from ..recovery import FileOperationError, FatalError, CorruptionError, SchemaVersionError
from ..logs import get_logger
from ..models import StoreDocument
from ..version import APP_SCHEMA_VERSION

log = get_logger("io")

def _cleanup(temp_path):
    if temp_path is None or not os.path.exists(temp_path):
        return
    try:
        os.unlink(temp_path)
        log.debug(f"Cleaned up temporary file: {temp_path}")
    except OSError as cleanup_error:
        # Don't raise while already handling a failure, just log
        log.warning(f"Could not clean up temp file {temp_path}: {cleanup_error}")

def _create_dirs(file_path : Path):
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
    except (OSError, PermissionError) as e:
        error_msg = f"Cannot create directory {file_path.parent}: {e}"
        log.error(error_msg)
        raise FileOperationError(error_msg) from e

def atomic_write(file_path : Union[Path, str], data : Dict[str, Any], create_dirs : bool = False) -> bool:
    """
    Serialize and save data to a YAML file using atomic updates.

    The target is either fully replaced or left untouched.
    """
    file_path = Path(file_path)
    temp_path = None

    try:
        if create_dirs:
            _create_dirs(file_path)

        # Temporary file in the same directory as the target for atomicity
        with tempfile.NamedTemporaryFile(mode='w', encoding='utf-8', dir=file_path.parent, prefix=f".{file_path.name}.", suffix='.tmp', delete=False) as temp_file:
            temp_path = temp_file.name
            yaml.safe_dump(data, temp_file, default_flow_style=False, sort_keys=False, indent=2, allow_unicode=True)
            temp_file.flush()
            os.fsync(temp_file.fileno())

        os.replace(temp_path, file_path)
        log.debug(f"Successfully saved YAML file: {file_path}")
        return True

    except (yaml.YAMLError, TypeError) as e:
        _cleanup(temp_path)
        # FATAL ERROR: Data cannot be serialized
        error_msg = (f"Data serialization failed for {file_path}. "
                    f"In-memory data may be corrupt or contain non-serializable types: {e}")
        log.critical(error_msg)
        raise FatalError(error_msg) from e

    except FileOperationError:
        raise

    except (IOError, OSError) as e:
        _cleanup(temp_path)
        # RECOVERABLE ERROR: I/O issues
        error_msg = f"I/O error saving YAML file {file_path}: {e}"
        log.error(error_msg)
        raise FileOperationError(error_msg) from e

def check_schema_version(file_version: str) -> None:
    """Refuse documents written by a newer schema than this build."""
    try:
        found = version.parse(file_version)
    except version.InvalidVersion as e:
        raise CorruptionError(f"Invalid schema version in store: {file_version!r}") from e
    if found > version.parse(APP_SCHEMA_VERSION):
        raise SchemaVersionError(
            f"Store schema {file_version} is newer than supported {APP_SCHEMA_VERSION}; upgrade treedo"
        )
    if found < version.parse(APP_SCHEMA_VERSION):
        log.info(f"Store schema {file_version} will be rewritten as {APP_SCHEMA_VERSION} on next save")

def load_document(file_path : Union[Path, str]) -> Optional[StoreDocument]:
    """
    Load and validate the store document.

    Args:
        file_path: Path to the YAML store file

    Returns:
        The parsed document, or None if the file doesn't exist
    """
    file_path = Path(file_path)
    if not file_path.exists():
        return None

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            raw = yaml.safe_load(f.read()) or {}

    except yaml.YAMLError as e:
        # YAML syntax errors are fatal (corrupted file)
        raise CorruptionError(f"YAML syntax error in {file_path}: {e}") from e
    except (IOError, OSError) as e:
        raise FileOperationError(f"Failed to read file {file_path}: {e}") from e

    if not isinstance(raw, dict):
        raise CorruptionError(f"File {file_path} contains invalid data structure")

    check_schema_version(str(raw.get('schema_version', APP_SCHEMA_VERSION)))

    try:
        document = StoreDocument.model_validate(raw)
    except ValidationError as e:
        raise CorruptionError(f"Store file {file_path} failed validation: {e}") from e
    document.schema_version = APP_SCHEMA_VERSION
    return document
