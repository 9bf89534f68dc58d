"""
Shared, cross-cutting code for the API.

`core/` holds small building blocks that multiple features use (DB handle,
settings, object storage, outbound HTTP clients). Keep feature-specific SQL
and business rules in the corresponding feature package (e.g. `properties/`).
"""
