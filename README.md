# vulnreach

Building blocks for working out whether known vulnerabilities reach your code.

`vulnreach` reads vulnerability records in the OSV format, looks up which
records affect a given package or symbol, and, given the import and call
graphs of a program, finds short, readable witnesses (import chains and call
stacks) that lead from your entry points to a vulnerable package or function.

## Installation

```
pip install vulnreach
```

Python 3.10 or later is required. The package has no runtime dependencies.

## Modules

### `vulnreach.osv`

Dataclasses for OSV records: `Entry`, `Affected`, `Package`, `AffectsRange`,
`RangeEvent`, `Reference`, `DatabaseSpecific`, `EcosystemSpecific`,
`EcosystemSpecificImport` and `Credit`, plus the enums `AffectsRangeType`
(`UNSPECIFIED`, `GIT`, `SEMVER`) and `Ecosystem` (`GO`).

- `Entry.from_json(text)` / `Entry.from_dict(data)` parse a record; malformed
  shapes or times raise `ValueError`. The `published`, `modified` and
  `withdrawn` fields become timezone-aware `datetime` objects.
- `Entry.to_json()` / `Entry.to_dict()` serialise it again, leaving out empty
  optional fields. `to_json` produces compact JSON.

### `vulnreach.fileurl`

- `url_to_file_path(url, windows=None)` converts a `file:` URL to an absolute
  path.
- `url_from_file_path(path, windows=None)` converts an absolute path to a
  `file:` URL string.

`windows` selects Windows path rules (drive letters, UNC hosts) or POSIX
rules; left as `None`, the host system's rules apply. Failures such as a
non-file URL, a non-local host on POSIX, a missing drive letter on Windows or
a relative path raise `FileURLError`, a subclass of `ValueError`.

```python
from vulnreach.fileurl import url_from_file_path, url_to_file_path

url_to_file_path("file://localhost/path/to/file", windows=False)   # '/path/to/file'
url_from_file_path(r"C:\Program Files\app.txt", windows=True)
# 'file:///C:/Program%20Files/app.txt'
```

### `vulnreach.vulncheck`

The result graph types: `CallGraph` of `FuncNode`s and `CallSite`s,
`ImportGraph` of `PkgNode`s, `RequireGraph` of `ModNode`s, and `Result`,
which ties them to the detected `Vuln`s. Edges point from a vulnerable node
back towards the entries, and a sink id of `0` means "no node in this graph".
`Position`, `Module` and `Package` describe source locations, modules and
packages.

`ModuleVulnerabilities` is a list of `ModVulns` (a `Module` with its
`Entry` list) and answers two queries:

- `vulns_for_package(import_path)` picks the module whose path is the longest
  prefix of `import_path` (standard-library paths go to the module named
  `stdlib`), rewrites the path for a replaced module, and returns the entries
  that list that package.
- `vulns_for_symbol(import_path, symbol)` narrows that to entries naming the
  symbol; an import that lists no symbols affects all of them.

Helper functions: `is_std_package(pkg)`, `matches_platform(goos, goarch, imp)`,
`matches_platform_component(value, values)` (empty value or empty list
matches everything) and `vuln_matches_package(entry, pkg)`.

```python
from vulnreach.osv import Entry
from vulnreach.vulncheck import ModVulns, Module, ModuleVulnerabilities, matches_platform

with open("example-entry.json") as f:
    entry = Entry.from_json(f.read())

mv = ModuleVulnerabilities([
    ModVulns(Module(path="example.mod/a", version="v1.0.0"), [entry]),
])
for vuln in mv.vulns_for_symbol("example.mod/a/b", "Client.Do"):
    imports = [
        imp
        for affected in vuln.affected
        for imp in affected.ecosystem_specific.imports
        if matches_platform("linux", "amd64", imp)
    ]
    print(vuln.id, [imp.path for imp in imports])
```

### `vulnreach.witness`

- `import_chains(result)` maps each `Vuln` to representative import chains
  (lists of `PkgNode`, entry package first). Vulnerabilities of the same
  package share the same chains.
- `call_stacks(result)` maps each `Vuln` to representative call stacks (lists
  of `StackEntry`, entry function first; the last frame has `call=None`).
  Stacks are sorted so that those passing through fewer standard-library
  functions come first, then shorter ones, then those with fewer unresolved
  call sites.

Both searches are breadth-first from the sink and expand each node once, so
they report a representative subset rather than every path. The ordering
helpers `stack_weight`, `stack_confidence`, `stack_less`, `pos_less`,
`call_site_less` and `func_less` are available as well.

```python
from vulnreach.vulncheck import CallGraph, CallSite, FuncNode, Result, Vuln
from vulnreach.witness import call_stacks

main = FuncNode(id=1, name="main", pkg_path="example.mod/app")
bad = FuncNode(id=2, name="Parse", pkg_path="example.mod/lib",
               call_sites=[CallSite(parent=1, resolved=True)])
vuln = Vuln(symbol="Parse", call_sink=2)
result = Result(calls=CallGraph(functions={1: main, 2: bad}, entries=[1]), vulns=[vuln])

for stack in call_stacks(result)[vuln]:
    print(" -> ".join(e.function.name for e in stack))   # main -> Parse
```

## What this package does not do

- It does not load or analyse programs: the `Result` graphs must be built by
  the caller.
- It does not decide whether a module version falls inside an entry's
  affected version ranges; ranges are carried as data only.
- It does not fetch records from a vulnerability database.
- It has no command-line tool.