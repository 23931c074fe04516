from dataclasses import dataclass
from pathlib import Path

from homeferry.sizes import CategorySize


@dataclass
class BackupJob:
    """
    Represents the backup of one category into one archive.

    Attributes:
        size (CategorySize): Measured category, including which of its items exist.
        target (Path): Archive location inside the backup root.
        excludes (tuple): fnmatch patterns left out of the archive.

    Methods:
        describe() -> str:
            Returns a human-readable string describing the archive operation.
    """
    size: CategorySize
    target: Path
    excludes: tuple = ()

    @property
    def name(self) -> str:
        return self.size.category.name

    @property
    def archive_name(self) -> str:
        return self.size.category.archive_name

    @property
    def base_dir(self) -> Path:
        return self.size.category.base_dir

    def describe(self) -> str:
        return f"{self.base_dir}: {' '.join(self.size.items)}  -->  {self.target}"
