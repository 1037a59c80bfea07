"""
Shared, cross-cutting code for the API.

`core/` holds the building blocks every feature uses (settings, logging,
DB wiring, the record store, key naming, the identity provider client).
Keep feature-specific logic in the corresponding feature package
(e.g. `feedback/`).
"""
