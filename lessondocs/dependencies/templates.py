"""
Template store and loader dependencies for the API routers.

Routers receive these through ``Depends`` so tests can swap in a store
rooted in a temporary directory via ``app.dependency_overrides``.
"""
from fastapi import Depends

from lessondocs.services.template_loader import (
    TemplateLoader,
    TemplateStore,
    get_template_store,
)


def get_store() -> TemplateStore:
    """The configured template store."""
    return get_template_store()


def get_loader(store: TemplateStore = Depends(get_store)) -> TemplateLoader:
    """A template loader backed by the request's store."""
    return TemplateLoader(store)
