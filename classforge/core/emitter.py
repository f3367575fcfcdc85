"""
Writes definitions to disk.

Each definition lands at ``<output dir>/<type name as path>.<ext>``.
Existing files are only replaced when the definition's output asks for
it; writes go through a temporary file in the target directory and an
atomic rename.
"""

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Tuple

from ..logging_config import get_logger
from .container import Container
from .definition import NAMESPACE_SEPARATOR, Definition
from .dumper import DEFAULT_HEADER, Dumper
from .errors import EmissionError

logger = get_logger(__name__)

FILE_MODE = 0o666


class LocalFileSystem:
    """File system operations needed by the emitter."""

    def mkdir_all(self, path: Path):
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise EmissionError(f"Unable to create the {path} directory: {e}") from e

    def exists(self, path: Path) -> bool:
        return path.exists()

    def is_writable(self, path: Path) -> bool:
        return os.access(path, os.W_OK)

    def write_atomic(self, path: Path, content: bytes):
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=path.name + ".")
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise EmissionError(f'Failed to write the file "{path}": {e}') from e

    def set_permissions(self, path: Path, mode: int):
        umask = os.umask(0)
        os.umask(umask)
        try:
            os.chmod(path, mode & ~umask)
        except OSError as e:
            raise EmissionError(f"Unable to set permissions on {path}: {e}") from e


@dataclass
class EmissionReport:
    """Paths written and skipped by one ``emit`` call."""

    written: List[Path] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.written) + len(self.skipped)


class Emitter:
    """Serializes every definition of a set of containers to files."""

    def __init__(
        self,
        file_system: Optional[LocalFileSystem] = None,
        file_extension: str = ".php",
        header: str = DEFAULT_HEADER,
        dry_run: bool = False,
    ):
        self.file_system = file_system or LocalFileSystem()
        self.file_extension = file_extension
        self.dumper = Dumper(header=header)
        self.dry_run = dry_run

    def path_for(self, definition: Definition) -> Path:
        """Target file of ``definition``."""
        if definition.output is None:
            raise EmissionError(f'The definition "{definition.name}" has no output')
        relative = definition.name.replace(NAMESPACE_SEPARATOR, "/").lstrip("/")
        return Path(definition.output.dir) / (relative + self.file_extension)

    def iter_definitions(
        self, containers: Mapping[str, Container]
    ) -> Iterable[Tuple[str, Definition]]:
        for container in containers.values():
            yield from container.all()

    def emit(self, containers: Mapping[str, Container]) -> EmissionReport:
        """
        Write all definitions of ``containers``.

        Errors stop the run; files already written stay in place.
        """
        report = EmissionReport()
        fs = self.file_system

        for _, definition in self.iter_definitions(containers):
            path = self.path_for(definition)
            directory = path.parent

            if not fs.exists(directory):
                if self.dry_run:
                    report.written.append(path)
                    continue
                fs.mkdir_all(directory)
            if not self.dry_run and not fs.is_writable(directory):
                raise EmissionError(f"Unable to write in the {directory} directory.")

            if fs.exists(path) and not definition.output.overwrite:
                logger.debug("Skipping existing file %s", path)
                report.skipped.append(path)
                continue

            content = self.dumper.dump(definition)
            if not self.dry_run:
                fs.write_atomic(path, content.encode("utf-8"))
                fs.set_permissions(path, FILE_MODE)
            logger.info("Wrote %s", path)
            report.written.append(path)

        return report
