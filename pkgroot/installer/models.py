"""Data models for the installation system."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

from pkgroot.versions import Version, format_version, parse_version

if TYPE_CHECKING:
    from pkgroot.catalog.provider import CatalogPackage

MISSING_INSTALL_PATH = Path("ERROR")


class InstallMode(Enum):
    SIDE_BY_SIDE = "side_by_side"
    HIGHEST_VERSION_ONLY = "highest_version_only"


class Action(Enum):
    OK = "ok"
    ADD = "add"
    UPDATE = "update"
    REMOVE = "remove"
    ERROR = "error"


@dataclass(frozen=True)
class VersionConstraint:
    """A dependency declaration: name, minimum version and an optional pin.

    When ``specific_version`` is set it is the only acceptable version;
    otherwise anything at or above ``minimum_version`` is.
    """

    name: str
    minimum_version: Version
    specific_version: Version | None = None

    def __post_init__(self):
        if not self.name or not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("name must be a non-empty string")
        object.__setattr__(self, "minimum_version", parse_version(self.minimum_version))
        if self.specific_version is not None:
            object.__setattr__(
                self, "specific_version", parse_version(self.specific_version)
            )

    def accepts(self, version: Version) -> bool:
        if self.specific_version is not None:
            return version == self.specific_version
        return version >= self.minimum_version

    def pinned(self, version: "Version | str | None") -> VersionConstraint:
        """Return a copy pinned to ``version`` (or unpinned when None)."""
        return replace(
            self,
            specific_version=parse_version(version) if version is not None else None,
        )

    @property
    def display(self) -> str:
        text = f"{self.name}, v{format_version(self.minimum_version)}"
        if self.specific_version is not None:
            text += f", v{format_version(self.specific_version)}"
        return text

    def __str__(self) -> str:
        return self.display


@dataclass(frozen=True)
class PackageDescriptor:
    name: str
    version: Version
    is_enabled: bool = True
    is_dependency_package: bool = False
    priority: int = 0
    dependencies: tuple[VersionConstraint, ...] = ()

    def __post_init__(self):
        if not self.name or not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("name must be a non-empty string")
        object.__setattr__(self, "version", parse_version(self.version))
        object.__setattr__(self, "dependencies", tuple(self.dependencies))

    @property
    def id(self) -> str:
        return f"{self.name}_v{format_version(self.version)}"

    @property
    def fully_qualified_name(self) -> str:
        return f"({self.name}, v{format_version(self.version)})"

    def find_dependency(self, name: str) -> VersionConstraint | None:
        return next((d for d in self.dependencies if d.name == name), None)

    def with_pinned_dependency(
        self, name: str, version: "Version | str | None"
    ) -> PackageDescriptor:
        """Return a new descriptor whose constraint on ``name`` is pinned.

        Raises:
            KeyError: If this package declares no dependency on ``name``
        """
        if self.find_dependency(name) is None:
            raise KeyError(f"{self.fully_qualified_name} has no dependency on '{name}'")
        deps = tuple(
            d.pinned(version) if d.name == name else d for d in self.dependencies
        )
        return replace(self, dependencies=deps)

    def with_enabled(self, is_enabled: bool) -> PackageDescriptor:
        return replace(self, is_enabled=is_enabled)

    def __str__(self) -> str:
        return self.fully_qualified_name


@dataclass(frozen=True)
class InstalledPackage:
    """An installed package: its directory plus the descriptor read from it.

    Records whose ``install_path`` is ``MISSING_INSTALL_PATH`` are sentinels
    for dependencies that could not be satisfied from the installed set;
    ``missing_constraint`` holds the failed constraint and ``required_by``
    the package that declared it.
    """

    install_path: Path
    descriptor: PackageDescriptor
    missing_constraint: VersionConstraint | None = None
    required_by: PackageDescriptor | None = None

    def __post_init__(self):
        if not str(self.install_path).strip():
            raise ValueError("install_path must be a non-empty path")
        object.__setattr__(self, "install_path", Path(self.install_path))

    @classmethod
    def missing(
        cls, constraint: VersionConstraint, required_by: PackageDescriptor
    ) -> InstalledPackage:
        return cls(
            install_path=MISSING_INSTALL_PATH,
            descriptor=PackageDescriptor(
                name=constraint.display,
                version=constraint.minimum_version,
                is_enabled=False,
                priority=required_by.priority,
            ),
            missing_constraint=constraint,
            required_by=required_by,
        )

    @property
    def is_missing(self) -> bool:
        return self.install_path == MISSING_INSTALL_PATH

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def version(self) -> Version:
        return self.descriptor.version

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def key(self) -> tuple[str, str, str]:
        required_by = self.required_by.id if self.required_by else ""
        return (str(self.install_path), self.descriptor.id, required_by)

    @property
    def fully_qualified_name(self) -> str:
        if self.is_missing and self.required_by is not None:
            return f"[{self.descriptor.name}] required by {self.required_by.fully_qualified_name}"
        return f"({self.name}, v{format_version(self.version)}, {self.install_path})"

    def __str__(self) -> str:
        return self.fully_qualified_name


@dataclass(frozen=True)
class InstallationSettings:
    mode: InstallMode = InstallMode.HIGHEST_VERSION_ONLY
    clean_install: bool = False
    enable_updates: bool = False
    remove_orphans: bool = False
    update_before_installing: bool = False


@dataclass(frozen=True)
class Instruction:
    action: Action
    package: "CatalogPackage"
    message: str | None = None

    @property
    def key(self) -> tuple[str, Action]:
        if self.action == Action.ERROR and self.message:
            return (self.message, self.action)
        return (self.package.descriptor.id, self.action)


class InstructionSet:
    """Ordered, de-duplicated plan keyed by (package id, action)."""

    def __init__(self):
        self._instructions: dict[tuple[str, Action], Instruction] = {}

    def add(
        self, action: Action, package: "CatalogPackage", message: str | None = None
    ) -> bool:
        """Add an instruction unless one with the same key exists.

        Returns:
            True if the instruction was added, False if it was a duplicate
        """
        instruction = Instruction(action=action, package=package, message=message)
        if instruction.key in self._instructions:
            return False
        self._instructions[instruction.key] = instruction
        return True

    def of(self, action: Action) -> list[Instruction]:
        return [i for i in self._instructions.values() if i.action == action]

    def count(self, action: Action) -> int:
        return len(self.of(action))

    def __contains__(self, key: tuple[str, Action]) -> bool:
        return key in self._instructions

    def __iter__(self) -> Iterator[Instruction]:
        return iter(list(self._instructions.values()))

    def __len__(self) -> int:
        return len(self._instructions)


@dataclass
class PlanCounters:
    skipped: int = 0
    added: int = 0
    updated: int = 0
    removed: int = 0


@dataclass
class InstallPlan:
    package: "CatalogPackage"
    settings: InstallationSettings
    instructions: InstructionSet = field(default_factory=InstructionSet)
    counters: PlanCounters = field(default_factory=PlanCounters)

    @property
    def errors(self) -> list[Instruction]:
        return self.instructions.of(Action.ERROR)

    def is_ready(self) -> bool:
        return len(self.errors) == 0


class ConfigReadStatus(Enum):
    OK = "ok"
    MISSING = "missing"
    CORRUPT = "corrupt"


@dataclass(frozen=True)
class ConfigReadResult:
    status: ConfigReadStatus
    path: Path
    descriptor: PackageDescriptor | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == ConfigReadStatus.OK


__all__ = [
    "MISSING_INSTALL_PATH",
    "InstallMode",
    "Action",
    "VersionConstraint",
    "PackageDescriptor",
    "InstalledPackage",
    "InstallationSettings",
    "Instruction",
    "InstructionSet",
    "PlanCounters",
    "InstallPlan",
    "ConfigReadStatus",
    "ConfigReadResult",
]
