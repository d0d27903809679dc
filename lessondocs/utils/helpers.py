"""
Common utility functions and helpers.
"""
import io
import re
import zipfile
from pathlib import Path
from typing import Iterable, Optional, Tuple

DOCX_MIME_TYPE = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)

# Earliest timestamp a ZIP entry can carry; keeps archives byte-stable
FIXED_ZIP_TIMESTAMP: Tuple[int, int, int, int, int, int] = (1980, 1, 1, 0, 0, 0)

# Outside the XML 1.0 Char production
_XML_ILLEGAL = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def slugify(text: str, max_length: Optional[int] = None, default: str = "") -> str:
    """
    Turn free text into a filename-safe slug.

    Whitespace runs become underscores, every character outside
    ``[A-Za-z0-9_]`` is dropped and repeated underscores are collapsed.

    Args:
        text: Raw display text
        max_length: Optional upper bound on slug length
        default: Returned when nothing survives the cleanup

    Returns:
        Slug string
    """
    slug = re.sub(r"\s+", "_", (text or "").strip())
    slug = re.sub(r"[^A-Za-z0-9_]", "", slug)
    slug = re.sub(r"_+", "_", slug).strip("_")
    if max_length is not None:
        slug = slug[:max_length].rstrip("_")
    return slug or default


def xml_text(text: Optional[str]) -> Optional[str]:
    """
    Make free text safe to store in an XML text node.

    Vertical tabs and form feeds (Word's manual line and page breaks in
    pasted text) become newlines; every other character XML 1.0 cannot
    carry is dropped. Tab, newline and carriage return are kept.
    """
    if not text:
        return text
    text = text.replace("\x0b", "\n").replace("\x0c", "\n")
    return _XML_ILLEGAL.sub("", text)


def topic_slug(topic: str) -> str:
    """Replace every non-alphanumeric character with an underscore."""
    return re.sub(r"[^A-Za-z0-9]", "_", topic or "") or "Lesson"


def parse_week_number(week: str) -> Optional[int]:
    """
    Extract the week number from a label such as ``"3"`` or ``"Week 3"``.

    Returns:
        The first integer in the label, or None if there is none
    """
    match = re.search(r"\d+", str(week or ""))
    return int(match.group()) if match else None


def rezip(entries: Iterable[Tuple[str, bytes]]) -> bytes:
    """
    Write (name, data) pairs into a new deflated ZIP with fixed timestamps.

    Args:
        entries: Archive member names and their contents, in archive order

    Returns:
        ZIP archive bytes
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries:
            info = zipfile.ZipInfo(name, date_time=FIXED_ZIP_TIMESTAMP)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = 0o644 << 16
            zf.writestr(info, data)
    return buffer.getvalue()


def normalize_package(package_bytes: bytes) -> bytes:
    """Rewrite an OOXML package so identical content yields identical bytes."""
    with zipfile.ZipFile(io.BytesIO(package_bytes)) as zf:
        entries = [(info.filename, zf.read(info)) for info in zf.infolist()]
    return rezip(entries)


def package_directory(directory: Path) -> bytes:
    """
    Zip an unpacked OOXML package directory into document bytes.

    ``[Content_Types].xml`` is written first, the remaining parts in sorted
    order.

    Raises:
        FileNotFoundError: directory or its content-types part is missing
    """
    root = Path(directory)
    content_types = root / "[Content_Types].xml"
    if not content_types.is_file():
        raise FileNotFoundError(f"No [Content_Types].xml in {root}")

    parts = sorted(
        path for path in root.rglob("*")
        if path.is_file() and path != content_types
    )
    entries = [("[Content_Types].xml", content_types.read_bytes())]
    entries.extend((path.relative_to(root).as_posix(), path.read_bytes()) for path in parts)
    return rezip(entries)


def is_docx_archive(data: bytes) -> bool:
    """Return True if the bytes are a ZIP containing ``word/document.xml``."""
    if not data or not zipfile.is_zipfile(io.BytesIO(data)):
        return False
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return "word/document.xml" in zf.namelist()
