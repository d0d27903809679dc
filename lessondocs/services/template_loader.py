"""
Template loader.

Resolves a template identifier to DOCX bytes. The reserved default id maps
to the CTE template bundled with the package (shipped unpacked and zipped on
first use); any other id is looked up in a template store, either a local
directory or a remote object store reached over HTTP. Every failure on that
path (unknown id, network error, unreadable bytes) falls back to the
bundled template, so the loader only raises when the bundled template
itself is missing.
"""
from __future__ import annotations

import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Tuple

import aiofiles
import httpx

from lessondocs.config import settings
from lessondocs.services.template_filler import TemplateError
from lessondocs.utils.helpers import DOCX_MIME_TYPE, is_docx_archive, package_directory

logger = logging.getLogger(__name__)

_TEMPLATE_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]{0,63}$")


class TemplateNotFoundError(TemplateError):
    """The bundled default template is missing."""


def is_valid_template_id(template_id: str) -> bool:
    """Ids are filename-safe: letters, digits, ``-`` and ``_``."""
    return bool(_TEMPLATE_ID.match(template_id or ""))


@lru_cache(maxsize=4)
def _package_default(directory: str) -> bytes:
    return package_directory(Path(directory))


def load_default_template() -> bytes:
    """
    Bytes of the bundled CTE template.

    Raises:
        TemplateNotFoundError: the template directory is missing or incomplete
    """
    try:
        return _package_default(settings.DEFAULT_TEMPLATE_DIR)
    except FileNotFoundError as exc:
        raise TemplateNotFoundError(
            f"Default template not found at {settings.DEFAULT_TEMPLATE_DIR}"
        ) from exc


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------

class TemplateStore:
    """Where uploaded templates live. ``get`` returns None for unknown ids."""

    async def get(self, template_id: str) -> Optional[bytes]:
        raise NotImplementedError

    async def put(self, template_id: str, data: bytes) -> None:
        raise NotImplementedError

    def list_templates(self) -> List[Tuple[str, int]]:
        """Stores that cannot enumerate their contents return nothing."""
        return []


class LocalTemplateStore(TemplateStore):
    """Templates stored as ``<dir>/<id>.docx``."""

    def __init__(self, base_dir: Optional[str] = None) -> None:
        self.base_dir = Path(base_dir or settings.TEMPLATE_STORAGE_DIR)

    def path_for(self, template_id: str) -> Path:
        return self.base_dir / f"{template_id}.docx"

    async def get(self, template_id: str) -> Optional[bytes]:
        path = self.path_for(template_id)
        if not path.is_file():
            return None
        async with aiofiles.open(path, "rb") as f:
            return await f.read()

    async def put(self, template_id: str, data: bytes) -> None:
        os.makedirs(self.base_dir, exist_ok=True)
        async with aiofiles.open(self.path_for(template_id), "wb") as out:
            await out.write(data)

    def list_templates(self) -> List[Tuple[str, int]]:
        """(id, size in bytes) of every stored template, sorted by id."""
        if not self.base_dir.is_dir():
            return []
        return [
            (path.stem, path.stat().st_size)
            for path in sorted(self.base_dir.glob("*.docx"))
        ]


class HttpTemplateStore(TemplateStore):
    """Templates stored in a remote bucket at ``<base_url>/<id>.docx``."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = (base_url or settings.TEMPLATE_STORAGE_URL).rstrip("/")
        self.token = token if token is not None else settings.TEMPLATE_STORAGE_TOKEN
        self.timeout = httpx.Timeout(float(timeout or settings.TEMPLATE_FETCH_TIMEOUT), connect=10.0)

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def url_for(self, template_id: str) -> str:
        return f"{self.base_url}/{template_id}.docx"

    async def get(self, template_id: str) -> Optional[bytes]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.get(self.url_for(template_id), headers=self._headers())
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return resp.content

    async def put(self, template_id: str, data: bytes) -> None:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.put(
                self.url_for(template_id),
                content=data,
                headers={
                    **self._headers(),
                    "Content-Type": DOCX_MIME_TYPE,
                },
            )
        resp.raise_for_status()


def get_template_store() -> TemplateStore:
    """Remote store when TEMPLATE_STORAGE_URL is set, local directory otherwise."""
    if settings.TEMPLATE_STORAGE_URL:
        return HttpTemplateStore()
    return LocalTemplateStore()


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

class TemplateLoader:
    """
    Resolves template ids to bytes, falling back to the bundled template.

    Usage:
        loader = TemplateLoader()
        template_bytes = await loader.load("district-2024")
    """

    def __init__(self, store: Optional[TemplateStore] = None) -> None:
        self.store = store or get_template_store()

    async def load(self, template_id: Optional[str] = None) -> bytes:
        """
        Args:
            template_id: Stored template id; None or the default id selects
                the bundled template

        Returns:
            DOCX bytes

        Raises:
            TemplateNotFoundError: only when the bundled template is missing
        """
        if not template_id or template_id == settings.DEFAULT_TEMPLATE_ID:
            return load_default_template()

        if not is_valid_template_id(template_id):
            logger.warning("Malformed template id %r, using default template", template_id)
            return load_default_template()

        try:
            data = await self.store.get(template_id)
        except Exception as exc:
            logger.warning(
                "Failed to fetch template %r (%s), using default template",
                template_id, exc, exc_info=True,
            )
            return load_default_template()

        if data is None:
            logger.warning("Template %r not found, using default template", template_id)
            return load_default_template()

        if not is_docx_archive(data):
            logger.warning("Template %r is not a valid DOCX, using default template", template_id)
            return load_default_template()

        logger.info("Loaded template %r (%d bytes)", template_id, len(data))
        return data


async def load_template(template_id: Optional[str] = None) -> bytes:
    """Load a template with the configured store."""
    return await TemplateLoader().load(template_id)
