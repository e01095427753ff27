"""PWS History package.

Subpackages:
- ingestion: weather.com PWS history client, normalization and storage.
- services: date-range ingestion and stored-observation queries.
- api: FastAPI application and routes.
- schemas: response models.
- tests: Unit and API tests.
"""

__all__ = [
    "ingestion",
    "services",
    "api",
    "schemas",
]
