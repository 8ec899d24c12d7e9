import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional


class JsonFile:
    """JSON document on disk with secure permissions and atomic replacement

    Writes go to a temporary file in the same directory which is then
    renamed over the target, so readers only ever observe a complete
    document (either the old one or the new one).
    """

    def __init__(self, path):
        self.path = Path(path)

    def _ensure_secure_directory(self):
        """Create parent directory with secure permissions"""
        ensure_secure_directory(self.path.parent)

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> Optional[Any]:
        """Load the document, or None if it does not exist

        Raises:
            json.JSONDecodeError: If the file is not valid JSON
            OSError: If the file cannot be read
        """
        if not self.path.exists():
            return None
        return json.loads(self.path.read_text())

    def write(self, data: Any):
        """Atomically replace the document with ``data``"""
        self._ensure_secure_directory()

        fd, tmp_name = tempfile.mkstemp(
            dir=str(self.path.parent),
            prefix=f".{self.path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w") as handle:
                json.dump(data, handle, indent=2)
                handle.flush()
                os.fsync(handle.fileno())

            # Set file permissions to 600 on Unix-like systems
            if platform.system() != "Windows":
                os.chmod(tmp_name, 0o600)

            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise


def ensure_secure_directory(directory) -> Path:
    """Create ``directory`` (and parents) with 700 permissions if missing"""
    directory = Path(directory)
    if not directory.exists():
        directory.mkdir(parents=True, exist_ok=True)
        # Set directory permissions to 700 on Unix-like systems
        if platform.system() != "Windows":
            os.chmod(directory, 0o700)
    return directory
