"""Representative import chains and call stacks that witness vulnerabilities.

Both searches walk a result graph breadth-first from a vulnerable sink up to
the user's entry points. Each node is expanded at most once, so only a
representative subset of all chains and stacks is reported.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from functools import cmp_to_key

from vulnreach.vulncheck import (
    CallSite,
    FuncNode,
    PkgNode,
    Position,
    Result,
    Vuln,
    is_std_package,
)

# A chain of packages, each imported by its predecessor, from an entry
# package down to a vulnerable one.
ImportChain = list[PkgNode]


@dataclass(eq=False)
class StackEntry:
    """A frame of a call stack.

    ``call`` is the call site leading to the next frame; it is None for the
    last frame, the vulnerable function itself.
    """

    function: FuncNode
    call: CallSite | None = None


# A call stack from an entry function down to a call of a vulnerable symbol.
CallStack = list[StackEntry]


def import_chains(result: Result) -> dict[Vuln, list[ImportChain]]:
    """Return representative import chains for every vulnerability in ``result``.

    Vulnerabilities of the same package share the same list of chains; a
    vulnerability without an import sink gets an empty list.
    """
    per_sink: dict[int, list[Vuln]] = {}
    for vuln in result.vulns:
        per_sink.setdefault(vuln.import_sink, []).append(vuln)

    chains: dict[Vuln, list[ImportChain]] = {}
    for sink, vulns in per_sink.items():
        found = _import_chains(sink, result)
        for vuln in vulns:
            chains[vuln] = found
    return chains


def _import_chains(sink: int, result: Result) -> list[ImportChain]:
    if sink == 0 or result.imports is None:
        return []
    packages = result.imports.packages
    entries = set(result.imports.entries)

    chains: list[ImportChain] = []
    seen: set[int] = set()
    start = packages[sink]
    queue: deque[tuple[PkgNode, tuple[PkgNode, ...]]] = deque([(start, (start,))])
    while queue:
        pkg, chain = queue.popleft()
        if pkg.id in seen:
            continue
        seen.add(pkg.id)
        for importer_id in pkg.imported_by:
            importer = packages[importer_id]
            extended = (importer, *chain)
            if importer.id in entries:
                chains.append(list(extended))
            queue.append((importer, extended))
    return chains


def call_stacks(result: Result) -> dict[Vuln, list[CallStack]]:
    """Return representative call stacks for every vulnerability in ``result``.

    Stacks are ordered by how easy they seem to understand: fewer frames in
    the standard library first, then shorter stacks, then fewer dynamic calls.
    A vulnerability without a call sink gets an empty list.
    """
    stacks: dict[Vuln, list[CallStack]] = {}
    for vuln in result.vulns:
        found = _call_stacks(vuln.call_sink, result)
        found.sort(key=lambda s: (stack_confidence(s), len(s), stack_weight(s)))
        stacks[vuln] = found
    return stacks


def _call_stacks(sink: int, result: Result) -> list[CallStack]:
    if sink == 0 or result.calls is None:
        return []
    functions = result.calls.functions
    entries = set(result.calls.entries)

    stacks: list[CallStack] = []
    seen: set[int] = set()
    start = functions[sink]
    queue: deque[tuple[FuncNode, tuple[StackEntry, ...]]] = deque(
        [(start, (StackEntry(start),))]
    )
    while queue:
        func, stack = queue.popleft()
        if func.id in seen:
            continue
        seen.add(func.id)
        # One call site per caller suffices since each function is visited once.
        for site in _pick_call_sites(func.call_sites, result, seen):
            caller = functions[site.parent]
            extended = (StackEntry(caller, site), *stack)
            if caller.id in entries:
                stacks.append(list(extended))
            queue.append((caller, extended))
    return stacks


def _pick_call_sites(
    sites: list[CallSite], result: Result, visited: set[int]
) -> list[CallSite]:
    """Pick the smallest call site of each unvisited caller, ordered by caller."""
    smallest: dict[int, CallSite] = {}
    for site in sites:
        if site.parent in visited:
            continue
        if call_site_less(site, smallest.get(site.parent)):
            smallest[site.parent] = site

    functions = result.calls.functions if result.calls is not None else {}
    callers = sorted(
        (functions[parent] for parent in smallest),
        key=cmp_to_key(_cmp_from_less(func_less)),
    )
    return [smallest[caller.id] for caller in callers]


def _cmp_from_less(less):
    def compare(a, b) -> int:
        if less(a, b):
            return -1
        if less(b, a):
            return 1
        return 0

    return compare


def stack_weight(stack: CallStack) -> int:
    """Return the number of unresolved (dynamic) call sites in ``stack``."""
    return sum(1 for e in stack if e.call is not None and not e.call.resolved)


def stack_confidence(stack: CallStack) -> int:
    """Return the number of frames in ``stack`` that are standard-library functions.

    Such stacks have often proved to be false positives.
    """
    return sum(1 for e in stack if is_std_package(e.function.pkg_path))


def stack_less(s1: CallStack, s2: CallStack) -> bool:
    """Order stacks by confidence, then length, then weight.

    Stacks equal on all three compare as less.
    """
    c1, c2 = stack_confidence(s1), stack_confidence(s2)
    if c1 != c2:
        return c1 < c2
    if len(s1) != len(s2):
        return len(s1) < len(s2)
    w1, w2 = stack_weight(s1), stack_weight(s2)
    if w1 != w2:
        return w1 < w2
    return True


def pos_less(p1: Position, p2: Position) -> bool:
    """Order positions by line, then column, then file name."""
    if p1.line != p2.line:
        return p1.line < p2.line
    if p1.column != p2.column:
        return p1.column < p2.column
    return p1.filename < p2.filename


def call_site_less(cs1: CallSite, cs2: CallSite | None) -> bool:
    """Order call sites by position; any site is less than None."""
    if cs2 is None:
        return True
    p1, p2 = cs1.pos, cs2.pos
    if p1 is not None and p2 is not None:
        if pos_less(p1, p2):
            return True
        if pos_less(p2, p1):
            return False
        return f"{cs1.recv_type}.{cs2.name}" < f"{cs2.recv_type}.{cs2.name}"
    if p2 is None:
        return True
    if p1 is None:
        return False
    return f"{cs1.recv_type}.{cs2.name}" < f"{cs2.recv_type}.{cs2.name}"


def func_less(f1: FuncNode, f2: FuncNode) -> bool:
    """Order functions by position and, on a tie, by their qualified name."""
    p1, p2 = f1.pos, f2.pos
    if p1 is not None and p2 is not None:
        if pos_less(p1, p2):
            return True
        if pos_less(p2, p1):
            return False
        return str(f1) < str(f2)
    if p2 is None:
        return True
    if p1 is None:
        return False
    return str(f1) < str(f2)