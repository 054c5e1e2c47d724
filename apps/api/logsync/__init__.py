"""
LogSync - log ingestion core.

Turns unlabeled log files, plain or inside zip/gzip/7z archives, into
structured entries without per-file configuration.

Modules:
    - core: Configuration, logging, timestamps, rate limiting
    - schemas: Pydantic models (log entries, formats, API responses)
    - parsers: Layout compiler, line parsers, format detection, archives,
      folder scanning, application grouping
    - services: Ingestion orchestration
    - routes: API endpoints
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
