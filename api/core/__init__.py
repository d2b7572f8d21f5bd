"""
Shared, cross-cutting code for the API.

`core/` holds the small building blocks the feature packages use
(DB wiring, settings, logging, middleware). Keep resource-specific SQL and
status mapping in the corresponding feature package (e.g. `users/`).
"""
