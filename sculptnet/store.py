"""
Path-addressed parameter store with validate-or-revert updates.
"""
import copy
import json
import logging
from typing import Any, Dict, List, Optional

from .prompt import default_prompt, validate_prompt
from .types import FailureKind, ImportResult, UpdateResult, ValidationResult

logger = logging.getLogger(__name__)

_MISSING = object()


def split_path(path: str) -> Optional[List[str]]:
    """Split a dot path into segments; None if the path is empty or has empty segments."""
    if not isinstance(path, str) or not path:
        return None
    keys = path.split(".")
    if any(not key for key in keys):
        return None
    return keys


def get_at_path(document: Any, path: str) -> Any:
    """
    Read the value at a dot path.

    Numeric segments index into lists. Returns None when any segment is missing.
    """
    keys = split_path(path)
    if keys is None:
        return None
    current = document
    for key in keys:
        if isinstance(current, dict):
            current = current.get(key, _MISSING)
        elif isinstance(current, list) and key.isdigit() and int(key) < len(current):
            current = current[int(key)]
        else:
            return None
        if current is _MISSING:
            return None
    return current


def set_at_path(document: Any, keys: List[str], value: Any) -> Any:
    """
    Return a copy of `document` with `value` written at `keys`.

    Intermediate records are created (or replace non-record values) as needed;
    numeric segments address existing list items. The input is never mutated.
    """
    key, rest = keys[0], keys[1:]

    if isinstance(document, list) and key.isdigit() and int(key) < len(document):
        updated = list(document)
        index = int(key)
        updated[index] = value if not rest else set_at_path(updated[index], rest, value)
        return updated

    updated = dict(document) if isinstance(document, dict) else {}
    if not rest:
        updated[key] = value
    else:
        updated[key] = set_at_path(updated.get(key), rest, value)
    return updated


def deep_merge(target: Dict[str, Any], source: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge `source` records into a copy of `target`; lists and scalars replace."""
    result = dict(target)
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class ParameterStore:
    """
    Holds the parameter document and its last-known-valid snapshot.

    All mutation goes through `update`, `import_json`, `reset` and
    `initialize`. Readers always get a deep copy of a schema-valid document.
    """

    def __init__(self, base: Optional[Dict[str, Any]] = None):
        self._current: Dict[str, Any] = default_prompt()
        self._last_valid: Dict[str, Any] = self._current
        self.initialized = False
        self.last_validation: Optional[ValidationResult] = None
        if base is not None:
            self.initialize(base)

    @property
    def document(self) -> Dict[str, Any]:
        """Deep copy of the current document."""
        return copy.deepcopy(self._current)

    def get(self, path: str) -> Any:
        """Read a value by dot path (copied, so callers cannot mutate the store)."""
        return copy.deepcopy(get_at_path(self._current, path))

    def initialize(self, base: Optional[Dict[str, Any]] = None) -> ValidationResult:
        """
        Merge a partial document over the defaults.

        Falls back to the defaults if the merged document is invalid.
        """
        merged = deep_merge(default_prompt(), copy.deepcopy(base)) if base else default_prompt()
        validation = validate_prompt(merged)
        if validation.success:
            self._commit(merged)
        else:
            logger.warning("Initial document rejected, using defaults: %s", validation.describe())
            self._commit(default_prompt())
        self.initialized = True
        self.last_validation = validation
        return validation

    def update(self, path: str, value: Any) -> UpdateResult:
        """
        Write `value` at `path`, keeping the document valid.

        Args:
            path: Dot-separated path, e.g. "lighting.conditions"
            value: New value

        Returns:
            UpdateResult with the previous value, or an error listing every violation
        """
        previous_value = self.get(path)
        keys = split_path(path)
        if keys is None:
            return UpdateResult(
                success=False,
                previous_value=previous_value,
                error=f"{path!r}: invalid path",
                kind=FailureKind.VALIDATION,
            )

        candidate = set_at_path(copy.deepcopy(self._current), keys, copy.deepcopy(value))
        validation = validate_prompt(candidate)
        self.last_validation = validation

        if validation.success:
            self._commit(candidate)
            logger.debug("Updated %s: %r -> %r", path, previous_value, value)
            return UpdateResult(success=True, previous_value=previous_value)

        self._current = self._last_valid
        error = validation.describe()
        logger.warning("Rejected update to %s: %s", path, error)
        return UpdateResult(
            success=False,
            previous_value=previous_value,
            error=error,
            kind=FailureKind.VALIDATION,
        )

    def validate(self) -> ValidationResult:
        """Validate the current document."""
        self.last_validation = validate_prompt(self._current)
        return self.last_validation

    def reset(self) -> None:
        """Restore the default document."""
        self._commit(default_prompt())
        self.initialized = True
        self.last_validation = ValidationResult(success=True)

    def export(self) -> str:
        """Serialize the current document as JSON."""
        return json.dumps(self._current, indent=2)

    def import_json(self, text: str) -> ImportResult:
        """
        Replace the document with a serialized one.

        Parse errors and validation errors both leave the store untouched.
        """
        try:
            parsed = json.loads(text)
        except (ValueError, TypeError, RecursionError) as e:
            # ValueError covers JSONDecodeError and UnicodeDecodeError from bytes input
            return ImportResult(success=False, error=f"JSON parse error: {e}", kind=FailureKind.PARSE)

        validation = validate_prompt(parsed)
        self.last_validation = validation
        if not validation.success:
            return ImportResult(success=False, error=validation.describe(), kind=FailureKind.VALIDATION)

        self._commit(parsed)
        logger.info("Imported parameter document")
        return ImportResult(success=True)

    def _commit(self, document: Dict[str, Any]) -> None:
        self._current = document
        self._last_valid = document
