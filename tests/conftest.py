# ABOUTME: Shared pytest fixtures for comicshelf tests.
# ABOUTME: Builds CBZ archives (with and without ComicInfo.xml) and comic source folders.

from collections.abc import Callable
from pathlib import Path

import pytest

from tests.fixtures.archives import comic_info_xml, write_cbz


@pytest.fixture
def make_cbz(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture: make_cbz("name.cbz", Series="Batman", ...) -> path."""

    def _make(name: str, directory: Path | None = None, **fields: str) -> Path:
        target_dir = directory or tmp_path
        target_dir.mkdir(parents=True, exist_ok=True)
        info = comic_info_xml(**fields) if fields else None
        return write_cbz(target_dir / name, info)

    return _make


@pytest.fixture
def sample_cbz(tmp_path: Path) -> Path:
    """A CBZ whose ComicInfo.xml names a DC Batman issue."""
    return write_cbz(
        tmp_path / "batman001.cbz",
        comic_info_xml(
            Series="Batman",
            Number="1",
            Title="The Court of Owls",
            Publisher="DC Comics",
            Year="2011",
            Writer="Scott Snyder, Greg Capullo",
            Summary="Bruce Wayne faces a secret society.",
            PageCount="32",
        ),
    )


@pytest.fixture
def plain_cbz(tmp_path: Path) -> Path:
    """A valid CBZ with no ComicInfo.xml entry."""
    return write_cbz(tmp_path / "Saga 001 (2012).cbz")


@pytest.fixture
def corrupt_cbz(tmp_path: Path) -> Path:
    """A file with a .cbz extension that is not a zip archive."""
    filepath = tmp_path / "corrupt.cbz"
    filepath.write_text("this is not a valid cbz file")
    return filepath


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """A download folder with a mix of series, publishers, and loose files."""
    source = tmp_path / "downloads"
    source.mkdir()
    for name in (
        "Batman #001 (2016).cbz",
        "Batman #002 (2016).cbz",
        "Geiger 001 (2024).cbz",
        "Geiger 002 (2024).cbz",
        "Random Indie Thing.pdf",
        "notes.txt",
    ):
        if name.endswith(".cbz"):
            write_cbz(source / name)
        else:
            (source / name).write_bytes(b"x")
    return source
