"""
Installed SDK layout.

The native-module loader only needs the destination directory to exist and
to hold the headers and libraries; these helpers check that contract.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

REQUIRED_DIRS = ("include", "lib")


@dataclass
class InstallationStatus:
    """Structural state of an installed SDK tree."""

    destination: Path
    exists: bool
    missing: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return self.exists and not self.missing

    def __str__(self) -> str:
        if not self.exists:
            return f"SDK not installed: {self.destination}"
        if self.missing:
            return (
                f"SDK at {self.destination} is incomplete, missing: "
                f"{', '.join(self.missing)}"
            )
        return f"SDK installed at {self.destination}"


def check_installation(destination: Union[str, Path]) -> InstallationStatus:
    """
    Check whether destination holds a structurally complete SDK.

    Example:
        >>> status = check_installation(Path("sdk"))
        >>> status.complete
        True
    """
    destination = Path(destination)
    if not destination.is_dir():
        return InstallationStatus(destination=destination, exists=False)

    missing = [name for name in REQUIRED_DIRS if not (destination / name).is_dir()]
    return InstallationStatus(destination=destination, exists=True, missing=missing)


__all__ = ["InstallationStatus", "check_installation", "REQUIRED_DIRS"]
