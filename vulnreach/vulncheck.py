"""Result graphs of a vulnerability reachability analysis and vulnerability lookup.

The graphs are sliced from a program's call, import and module-requirement
graphs. Their edges point from vulnerable sinks back towards the user's entry
points, so the part relevant to one vulnerability can be walked cheaply.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from vulnreach.osv import Entry, EcosystemSpecificImport

# The standard library is modelled as an artificial module with this path.
STDLIB_MODULE_PATH = "stdlib"


@dataclass(frozen=True)
class Position:
    """A location in a source file; line and column count from 1."""

    filename: str = ""
    offset: int = 0
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        text = self.filename
        if self.line > 0:
            text = f"{text}:{self.line}" if text else str(self.line)
            if self.column > 0:
                text += f":{self.column}"
        return text or "-"


@dataclass(eq=False)
class Module:
    """A module: its path, version, directory and optional replacement."""

    path: str = ""
    version: str = ""
    dir: str = ""
    replace: Module | None = None


@dataclass(eq=False)
class Package:
    """A package under analysis, with its imports and enclosing module."""

    name: str = ""
    pkg_path: str = ""
    imports: list[Package] = field(default_factory=list)
    module: Module | None = None


@dataclass(eq=False)
class Vuln:
    """A detected vulnerability and its sinks in the result graphs.

    A sink id of 0 means the vulnerability has no node in that graph.
    """

    osv: Entry | None = None
    symbol: str = ""
    pkg_path: str = ""
    mod_path: str = ""
    call_sink: int = 0
    import_sink: int = 0
    require_sink: int = 0


@dataclass(eq=False)
class CallSite:
    """A call made from the function with id ``parent``."""

    parent: int = 0
    name: str = ""
    recv_type: str = ""
    pos: Position | None = None
    resolved: bool = False


@dataclass(eq=False)
class FuncNode:
    """A function in the call graph together with the sites that call it."""

    id: int = 0
    name: str = ""
    recv_type: str = ""
    pkg_path: str = ""
    pos: Position | None = None
    call_sites: list[CallSite] = field(default_factory=list)

    def __str__(self) -> str:
        qualifier = self.recv_type or self.pkg_path
        return f"{qualifier}.{self.name}"


@dataclass(eq=False)
class CallGraph:
    """Call graph slice directed from vulnerable functions to entry functions."""

    functions: dict[int, FuncNode] = field(default_factory=dict)
    entries: list[int] = field(default_factory=list)


@dataclass(eq=False)
class ModNode:
    """A module in the requires graph; ``replace`` of 0 means no replacement."""

    id: int = 0
    path: str = ""
    version: str = ""
    replace: int = 0
    required_by: list[int] = field(default_factory=list)


@dataclass(eq=False)
class RequireGraph:
    """Module graph slice directed from vulnerable modules to entry modules."""

    modules: dict[int, ModNode] = field(default_factory=dict)
    entries: list[int] = field(default_factory=list)


@dataclass(eq=False)
class PkgNode:
    """A package in the import graph."""

    id: int = 0
    name: str = ""
    path: str = ""
    module: int = 0
    imported_by: list[int] = field(default_factory=list)
    pkg: Package | None = None


@dataclass(eq=False)
class ImportGraph:
    """Import graph slice directed from vulnerable packages to entry packages."""

    packages: dict[int, PkgNode] = field(default_factory=dict)
    entries: list[int] = field(default_factory=list)


@dataclass(eq=False)
class Result:
    """How known vulnerabilities are reachable in the analysed code."""

    calls: CallGraph | None = None
    imports: ImportGraph | None = None
    requires: RequireGraph | None = None
    vulns: list[Vuln] = field(default_factory=list)
    modules: list[Module] = field(default_factory=list)


@dataclass
class ModVulns:
    """The vulnerabilities known for one module."""

    mod: Module
    vulns: list[Entry] = field(default_factory=list)


def is_std_package(pkg: str) -> bool:
    """Report whether an import path names a standard-library package."""
    if not pkg:
        return False
    # Standard-library paths have no dot in their first element.
    return "." not in pkg.split("/", 1)[0]


class ModuleVulnerabilities(list):
    """Vulnerabilities grouped per module, queried by package and symbol."""

    def __init__(self, groups: Iterable[ModVulns] = ()) -> None:
        super().__init__(groups)

    def _most_specific(self, import_path: str) -> ModVulns | None:
        is_std = is_std_package(import_path)
        best: ModVulns | None = None
        for group in self:
            if is_std and group.mod.path == STDLIB_MODULE_PATH:
                best = group
            elif import_path.startswith(group.mod.path):
                if best is None or len(best.mod.path) < len(group.mod.path):
                    best = group
        return best

    def vulns_for_package(self, import_path: str) -> list[Entry]:
        """Return the entries affecting ``import_path``.

        Entries are taken from the module that is the longest prefix of the
        path; standard-library paths belong to the artificial stdlib module.
        A replaced module is matched under its replacement's path.
        """
        group = self._most_specific(import_path)
        if group is None:
            return []
        if group.mod.replace is not None:
            import_path = group.mod.replace.path + import_path.removeprefix(group.mod.path)
        return [
            entry
            for entry in group.vulns
            if any(
                imp.path == import_path
                for affected in entry.affected
                for imp in affected.ecosystem_specific.imports
            )
        ]

    def vulns_for_symbol(self, import_path: str, symbol: str) -> list[Entry]:
        """Return the entries of ``import_path`` that affect ``symbol``.

        An import listing no symbols affects every symbol of the package.
        """
        return [
            entry
            for entry in self.vulns_for_package(import_path)
            if any(
                imp.path == import_path and (not imp.symbols or symbol in imp.symbols)
                for affected in entry.affected
                for imp in affected.ecosystem_specific.imports
            )
        ]


def matches_platform_component(value: str, values: list[str]) -> bool:
    """Report whether a GOOS or GOARCH value is in ``values``.

    An empty value or an empty list matches everything.
    """
    return not value or not values or value in values


def matches_platform(goos: str, goarch: str, imp: EcosystemSpecificImport) -> bool:
    """Report whether an affected import applies to the given platform."""
    return matches_platform_component(goos, imp.goos) and matches_platform_component(
        goarch, imp.goarch
    )


def vuln_matches_package(entry: Entry, pkg: str) -> bool:
    """Report whether ``entry`` affects the package with import path ``pkg``."""
    return any(
        imp.path == pkg
        for affected in entry.affected
        for imp in affected.ecosystem_specific.imports
    )