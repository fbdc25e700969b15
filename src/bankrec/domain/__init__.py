"""Domain layer for bankrec."""

import importlib

# Services are resolved lazily: the database layer imports domain.entities,
# and the services import the database layer.
_SERVICES = {
    "StatementImportService": "bankrec.domain.statement_import",
    "ReviewService": "bankrec.domain.review",
    "CommitService": "bankrec.domain.commit",
    "LedgerService": "bankrec.domain.ledger",
    "CategoryService": "bankrec.domain.category",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
