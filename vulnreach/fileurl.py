"""Conversion between ``file`` URLs and absolute file-system paths."""

from __future__ import annotations

import os
import re
from typing import NamedTuple
from urllib.parse import quote, unquote


class FileURLError(ValueError):
    """Raised when a URL or path cannot be converted."""


_NOT_ABSOLUTE = "path is not absolute"

_SCHEME = re.compile(r"([A-Za-z][A-Za-z0-9+.\-]*):")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_DRIVE = re.compile(r"[A-Za-z]:")
_UNC = re.compile(r"[\\/]{2}[^\\/.][^\\/]*[\\/][^\\/.][^\\/]*")
_PATH_SAFE = "/$&+,:;=@"
_HOST_SAFE = "!$&'()*+,;=:[]<>\""


class _URL(NamedTuple):
    scheme: str
    host: str
    path: str
    opaque: str


def _unescape(text: str) -> str:
    bad = _BAD_ESCAPE.search(text)
    if bad is not None:
        start = bad.start()
        raise FileURLError(f'invalid URL escape "{text[start:start + 3]}"')
    return unquote(text, errors="surrogateescape")


def _parse(raw: str) -> _URL:
    rest = raw.split("#", 1)[0].split("?", 1)[0]
    if rest.startswith(":"):
        raise FileURLError("missing protocol scheme")
    scheme = ""
    match = _SCHEME.match(rest)
    if match is not None:
        scheme = match.group(1).lower()
        rest = rest[match.end():]
    if scheme and not rest.startswith("/"):
        return _URL(scheme, "", "", rest)
    host = ""
    if rest.startswith("//") and (scheme or not rest.startswith("///")):
        authority, slash, remainder = rest[2:].partition("/")
        host = authority.rpartition("@")[2]
        rest = slash + remainder
    return _URL(scheme, host, _unescape(rest), "")


def _is_windows(windows: bool | None) -> bool:
    return os.name == "nt" if windows is None else windows


def _volume_name(path: str, windows: bool) -> str:
    if not windows:
        return ""
    for pattern in (_DRIVE, _UNC):
        match = pattern.match(path)
        if match is not None:
            return match.group(0)
    return ""


def _is_abs(path: str, windows: bool) -> bool:
    if not windows:
        return path.startswith("/")
    volume = _volume_name(path, True)
    if not volume:
        return False
    if path[:2] in ("\\\\", "//", "\\/", "/\\"):
        return True
    rest = path[len(volume):]
    return rest[:1] in ("\\", "/") and rest != ""


def _from_slash(path: str, windows: bool) -> str:
    return path.replace("/", "\\") if windows else path


def _to_slash(path: str, windows: bool) -> str:
    return path.replace("\\", "/") if windows else path


def _check_abs(path: str, windows: bool) -> str:
    if not _is_abs(path, windows):
        raise FileURLError(_NOT_ABSOLUTE)
    return path


def _convert_posix(host: str, path: str) -> str:
    if host not in ("", "localhost"):
        raise FileURLError("file URL specifies non-local host")
    return path


def _convert_windows(host: str, path: str) -> str:
    if not path.startswith("/"):
        raise FileURLError(_NOT_ABSOLUTE)
    path = _from_slash(path, True)
    # A host other than localhost names the UNC server.
    if host and host != "localhost":
        if _volume_name(host, True):
            raise FileURLError("file URL encodes volume in host field: too few slashes?")
        return "\\\\" + host + path
    volume = _volume_name(path[1:], True)
    if not volume or volume.startswith("\\\\"):
        raise FileURLError("file URL missing drive letter")
    return path[1:]


def _format(host: str, path: str) -> str:
    text = "file:"
    if host or path:
        text += "//" + quote(host, safe=_HOST_SAFE, errors="surrogateescape")
    escaped = quote(path, safe=_PATH_SAFE, errors="surrogateescape")
    if escaped and not escaped.startswith("/") and host:
        text += "/"
    return text + escaped


def url_to_file_path(url: str, windows: bool | None = None) -> str:
    """Convert a ``file`` URL to an absolute path.

    ``windows`` selects Windows path rules; by default the host system's.
    Raises FileURLError when the URL has no absolute local path.
    """
    win = _is_windows(windows)
    parsed = _parse(url)
    if parsed.scheme != "file":
        raise FileURLError("non-file URL")
    if parsed.path == "":
        if parsed.host or not parsed.opaque:
            raise FileURLError("file URL missing path")
        return _check_abs(_from_slash(parsed.opaque, win), win)
    if win:
        path = _convert_windows(parsed.host, parsed.path)
    else:
        path = _convert_posix(parsed.host, parsed.path)
    return _check_abs(path, win)


def url_from_file_path(path: str, windows: bool | None = None) -> str:
    """Convert an absolute path to a ``file`` URL string.

    ``windows`` selects Windows path rules; by default the host system's.
    Raises FileURLError when the path is not absolute.
    """
    win = _is_windows(windows)
    if not _is_abs(path, win):
        raise FileURLError(_NOT_ABSOLUTE)

    volume = _volume_name(path, win)
    if volume:
        if volume.startswith("\\\\"):
            # \\host\share\path becomes file://host/share/path
            rest = _to_slash(path[2:], win)
            host, slash, tail = rest.partition("/")
            if not slash:
                return _format(rest, "/")
            return _format(host, slash + tail)
        # C:\path becomes file:///C:/path
        return _format("", "/" + _to_slash(path, win))

    return _format("", _to_slash(path, win))