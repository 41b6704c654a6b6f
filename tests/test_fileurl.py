import re
from typing import NamedTuple

import pytest

from vulnreach.fileurl import FileURLError, url_from_file_path, url_to_file_path


class Case(NamedTuple):
    url: str
    file_path: str = ""
    canonical_url: str = ""
    want_err: str = ""


POSIX_CASES = [
    Case(url="file:///path/to/file", file_path="/path/to/file"),
    Case(
        url="file:/path/to/file",
        file_path="/path/to/file",
        canonical_url="file:///path/to/file",
    ),
    Case(
        url="file://localhost/path/to/file",
        file_path="/path/to/file",
        canonical_url="file:///path/to/file",
    ),
    Case(
        url="file://host.example.com/path/to/file",
        want_err="file URL specifies non-local host",
    ),
]

WINDOWS_CASES = [
    Case(
        url="file://laptop/My%20Documents/FileSchemeURIs.doc",
        file_path="\\\\laptop\\My Documents\\FileSchemeURIs.doc",
    ),
    Case(
        url="file:///C:/Documents%20and%20Settings/davris/FileSchemeURIs.doc",
        file_path="C:\\Documents and Settings\\davris\\FileSchemeURIs.doc",
    ),
    Case(
        url="file:///D:/Program%20Files/Viewer/startup.htm",
        file_path="D:\\Program Files\\Viewer\\startup.htm",
    ),
    Case(
        url="file:///C:/Program%20Files/Music/Web%20Sys/main.html?REQUEST=RADIO",
        file_path="C:\\Program Files\\Music\\Web Sys\\main.html",
        canonical_url="file:///C:/Program%20Files/Music/Web%20Sys/main.html",
    ),
    Case(
        url="file://applib/products/a-b/abc_9/4148.920a/media/start.swf",
        file_path="\\\\applib\\products\\a-b\\abc_9\\4148.920a\\media\\start.swf",
    ),
    Case(
        url="file:////applib/products/a%2Db/abc%5F9/4148.920a/media/start.swf",
        want_err="file URL missing drive letter",
    ),
    Case(
        url="C:\\Program Files\\Music\\Web Sys\\main.html?REQUEST=RADIO",
        want_err="non-file URL",
    ),
    Case(
        url="file://D:/Program Files/Viewer/startup.htm",
        want_err="file URL encodes volume in host field: too few slashes?",
    ),
    Case(
        url="file:///C:/exampleㄓ.txt",
        file_path="C:\\exampleㄓ.txt",
        canonical_url="file:///C:/example%E3%84%93.txt",
    ),
    Case(url="file:///C:/example%E3%84%93.txt", file_path="C:\\exampleㄓ.txt"),
    Case(
        url="file:c:/path/to/file",
        file_path="c:\\path\\to\\file",
        canonical_url="file:///c:/path/to/file",
    ),
    Case(
        url="file://host.example.com/Share/path/to/file.txt",
        file_path="\\\\host.example.com\\Share\\path\\to\\file.txt",
    ),
    Case(
        url="file:////host.example.com/path/to/file",
        want_err="file URL missing drive letter",
    ),
    Case(
        url="file://///host.example.com/path/to/file",
        want_err="file URL missing drive letter",
    ),
]

ALL_CASES = [(case, False) for case in POSIX_CASES] + [
    (case, True) for case in WINDOWS_CASES
]
TO_PATH_OK = [(c, w) for c, w in ALL_CASES if c.url and not c.want_err]
TO_PATH_ERR = [(c, w) for c, w in ALL_CASES if c.url and c.want_err]
FROM_PATH = [(c, w) for c, w in ALL_CASES if c.file_path]


@pytest.mark.parametrize("case,windows", TO_PATH_OK)
def test_url_to_file_path(case, windows):
    assert url_to_file_path(case.url, windows=windows) == case.file_path


@pytest.mark.parametrize("case,windows", TO_PATH_ERR)
def test_url_to_file_path_errors(case, windows):
    with pytest.raises(FileURLError, match=re.escape(case.want_err)):
        url_to_file_path(case.url, windows=windows)


@pytest.mark.parametrize("case,windows", FROM_PATH)
def test_url_from_file_path(case, windows):
    want = case.canonical_url or case.url
    assert url_from_file_path(case.file_path, windows=windows) == want


@pytest.mark.parametrize("case,windows", FROM_PATH)
def test_round_trip_from_path(case, windows):
    url = url_from_file_path(case.file_path, windows=windows)
    assert url_to_file_path(url, windows=windows) == case.file_path


@pytest.mark.parametrize(
    "path,windows", [("relative/path", False), ("relative\\path", True), ("C:relative", True)]
)
def test_relative_path_rejected(path, windows):
    with pytest.raises(FileURLError, match="path is not absolute"):
        url_from_file_path(path, windows=windows)


def test_opaque_relative_rejected_on_posix():
    with pytest.raises(FileURLError, match="path is not absolute"):
        url_to_file_path("file:c:/path/to/file", windows=False)


def test_missing_path():
    with pytest.raises(FileURLError, match="file URL missing path"):
        url_to_file_path("file://host.example.com", windows=False)


def test_non_file_scheme_posix():
    with pytest.raises(FileURLError, match="non-file URL"):
        url_to_file_path("https://example.com/path", windows=False)


def test_invalid_escape_rejected():
    with pytest.raises(FileURLError, match="invalid URL escape"):
        url_to_file_path("file:///path/%zz", windows=False)


def test_error_is_value_error():
    with pytest.raises(ValueError):
        url_to_file_path("file://host.example.com/x", windows=False)


def test_posix_special_characters_escaped():
    url = url_from_file_path("/tmp/a b#c", windows=False)
    assert url_to_file_path(url, windows=False) == "/tmp/a b#c"