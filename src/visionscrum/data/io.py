import tempfile, yaml, json, os
from typing import Union, Dict, Any, Type, TypeVar, Optional
from pathlib import Path
from pydantic import BaseModel, ValidationError
from visionscrum.recovery import FileOperationError, FatalError, CorruptionError
from visionscrum.logs import get_logger

log = get_logger("io")

DATA_YAML = 0
DATA_JSON = 1

M = TypeVar("M", bound=BaseModel)

def _cleanup(temp_path: Optional[str]):
    if temp_path is not None and os.path.exists(temp_path):
        try:
            os.unlink(temp_path)
            log.debug(f"Cleaned up temporary file: {temp_path}")
        except OSError as cleanup_error:
            log.warning(f"Could not clean up temp file {temp_path}: {cleanup_error}")

def _create_dirs(file_path : Path):
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
    except (OSError, PermissionError) as e:
        error_msg = f"Cannot create directory {file_path.parent}: {e}"
        log.error(error_msg)
        raise FileOperationError(error_msg) from e

def atomic_write(data_type : int, file_path : Union[Path, str], data : Dict[str, Any], create_dirs : bool = False):
    """
    Serialize and save data to a JSON or YAML file using atomic updates.
    """
    file_path = Path(file_path)
    temp_path = None

    if data_type not in (DATA_YAML, DATA_JSON):
        raise FatalError("Unsupported Data Format")

    try:
        if create_dirs:
            _create_dirs(file_path)

        # Create temporary file in the same directory as target for atomicity
        with tempfile.NamedTemporaryFile(mode='w', encoding='utf-8', dir=file_path.parent, prefix=f".{file_path.name}.", suffix='.tmp', delete=False) as temp_file:
            temp_path = temp_file.name
            if data_type == DATA_YAML:
                yaml.safe_dump(data, temp_file, default_flow_style=False, sort_keys=False, indent=2, allow_unicode=True)
            else:
                json.dump(data, temp_file, indent=2, ensure_ascii=False)
            temp_file.flush()
            os.fsync(temp_file.fileno())

        # Atomic replace - this either completely succeeds or completely fails
        os.replace(temp_path, file_path)
        log.debug(f"Successfully saved file: {file_path}")
        return True

    except (yaml.YAMLError, TypeError, ValueError) as e:
        _cleanup(temp_path)
        # FATAL ERROR: Data cannot be serialized
        error_msg = (f"Data serialization failed for {file_path}. "
                    f"In-memory data may be corrupt or contain non-serializable types: {e}")
        log.critical(error_msg)
        raise FatalError(error_msg) from e

    except (IOError, OSError) as e:
        _cleanup(temp_path)
        # RECOVERABLE ERROR: I/O issues
        error_msg = f"I/O error saving file {file_path}: {e}"
        log.error(error_msg)
        raise FileOperationError(error_msg) from e

def load_model(model_type : Type[M], file_path : Union[Path, str]) -> Union[None, M]:
    """
    Load and validate a model stored as JSON.

    Args:
        model_type: The pydantic model the file holds
        file_path: Path to the JSON file

    Returns:
        The parsed model, or None if the file doesn't exist
    """
    file_path = Path(file_path)
    if not file_path.exists():
        return None

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        # JSON syntax errors are fatal (corrupted file)
        raise CorruptionError(f"JSON syntax error in {file_path}: {e}") from e
    except UnicodeDecodeError as e:
        raise CorruptionError(f"{file_path} is not UTF-8 text: {e}") from e
    except (IOError, OSError) as e:
        # I/O errors are recoverable
        raise FileOperationError(f"Failed to read file {file_path}: {e}") from e
    except Exception as e:
        # Unexpected errors
        raise FatalError(f"Unexpected error loading {file_path}: {e}") from e

    try:
        return model_type.model_validate(data)
    except ValidationError as e:
        raise CorruptionError(f"{file_path} does not hold a valid {model_type.__name__}: {e}") from e
