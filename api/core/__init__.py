"""
Shared, cross-cutting code for the API.

`core/` holds the building blocks every resource package uses (settings,
DB pool, table CRUD, object storage, uploads, errors, middleware). Keep
resource-specific rules in the corresponding package (e.g. `projects/`).
"""
