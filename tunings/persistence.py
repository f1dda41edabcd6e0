"""
Tuning bank file I/O.

Tunings file (JSON):
- Array of bank objects: name, order, isEditable, tunings
- Each tuning: name, masterSet
- tunings.json is the legacy (v0) schema, tunings_v1.json the current one

Bank export (.tbank):
- MessagePack binary format
- Contains one TuningBank + format version
"""
import json
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence, Union

import msgpack

from tunings.constants import TUNINGS_FILENAME_V0, TUNINGS_FILENAME_V1
from tunings.models import TuningBank

BANK_FILE_VERSION = "1.0.0"
BANK_FILE_SUFFIX = ".tbank"


def encode_banks(banks: Sequence[TuningBank]) -> str:
    """Serialize banks to the JSON tunings format."""
    return json.dumps([b.to_dict() for b in banks], indent=2)


def decode_banks(text: str) -> List[TuningBank]:
    """
    Parse the JSON tunings format.

    Raises:
        ValueError: If the text is not a JSON array of bank objects
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid tunings JSON: {e}") from e

    if not isinstance(data, list):
        raise ValueError(f"Tunings file must hold a JSON array, got {type(data).__name__}")

    return [TuningBank.from_dict(entry) for entry in data if isinstance(entry, dict)]


def _write_atomic(path: Path, data: Union[str, bytes]):
    """Write to a temp file next to `path`, then move it into place."""
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = "wb" if isinstance(data, bytes) else "w"
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=path.name, suffix=".tmp")
    try:
        with os.fdopen(fd, mode) as f:
            f.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


class TuningsFile:
    """Handles the versioned tunings file in a data directory."""

    def __init__(self, directory: Union[str, Path]):
        """
        Args:
            directory: Folder holding tunings.json / tunings_v1.json
        """
        self.directory = Path(directory).expanduser()

    @property
    def current_path(self) -> Path:
        return self.directory / TUNINGS_FILENAME_V1

    @property
    def legacy_path(self) -> Path:
        return self.directory / TUNINGS_FILENAME_V0

    def schema_version(self) -> Optional[int]:
        """
        Detect which schema generation is on disk.

        Returns:
            1 if the current file exists, 0 if only the legacy file exists,
            None on a fresh install
        """
        if self.current_path.exists():
            return 1
        if self.legacy_path.exists():
            return 0
        return None

    def load(self) -> List[TuningBank]:
        """
        Load banks from the current (v1) file.

        Returns:
            Loaded banks

        Raises:
            IOError: If the file cannot be read
            ValueError: If the file format is invalid
        """
        try:
            text = self.current_path.read_text(encoding="utf-8")
        except OSError as e:
            raise IOError(f"Failed to read tunings from {self.current_path}: {e}") from e
        return decode_banks(text)

    def save(self, banks: Sequence[TuningBank]):
        """
        Save banks to the current (v1) file.

        Raises:
            IOError: If save fails
        """
        try:
            _write_atomic(self.current_path, encode_banks(banks))
        except OSError as e:
            raise IOError(f"Failed to save tunings to {self.current_path}: {e}") from e


class BankFile:
    """Handles .tbank export/import of a single tuning bank."""

    @staticmethod
    def export_bank(bank: TuningBank, path: Union[str, Path]) -> Path:
        """
        Export a bank to a .tbank file.

        Args:
            bank: Bank to export
            path: Destination file path (suffix forced to .tbank)

        Returns:
            Path actually written

        Raises:
            IOError: If export fails
        """
        path = Path(path)
        if path.suffix != BANK_FILE_SUFFIX:
            path = path.with_suffix(BANK_FILE_SUFFIX)

        try:
            packed = msgpack.packb(
                {"version": BANK_FILE_VERSION, "bank": bank.to_dict()},
                use_bin_type=True,
            )
            _write_atomic(path, packed)
        except (OSError, TypeError, ValueError) as e:
            raise IOError(f"Failed to export bank to {path}: {e}") from e
        return path

    @staticmethod
    def import_bank(path: Union[str, Path]) -> TuningBank:
        """
        Import a bank from a .tbank file.

        Raises:
            IOError: If the file cannot be read
            ValueError: If the file format or version is invalid
        """
        path = Path(path)
        try:
            packed = path.read_bytes()
        except OSError as e:
            raise IOError(f"Failed to read bank from {path}: {e}") from e

        try:
            data = msgpack.unpackb(packed, raw=False)
        except (msgpack.exceptions.ExtraData, msgpack.exceptions.UnpackException, ValueError) as e:
            raise ValueError(f"Invalid {BANK_FILE_SUFFIX} file format: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("bank"), dict):
            raise ValueError(f"Invalid {BANK_FILE_SUFFIX} file: missing bank")

        version = str(data.get("version", "unknown"))
        if not version.startswith("1."):
            raise ValueError(f"Incompatible bank version: {version}. Expected 1.x")

        return TuningBank.from_dict(data["bank"])
