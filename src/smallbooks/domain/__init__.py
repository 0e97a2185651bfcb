"""Domain layer for smallbooks application."""

# Services are imported lazily: utils and database modules import
# smallbooks.domain.errors/entities, and services import those modules.
_SERVICES = {
    "AccountService": "smallbooks.domain.account",
    "CategorizationService": "smallbooks.domain.categorization",
    "LearningService": "smallbooks.domain.learning",
    "ImportCommitService": "smallbooks.domain.import_commit",
    "CSVImportService": "smallbooks.domain.csv_import",
    "LedgerService": "smallbooks.domain.ledger",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
