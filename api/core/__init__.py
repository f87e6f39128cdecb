"""
Shared, cross-cutting code for the API.

`core/` holds small building blocks every feature uses (DB wiring, the error
taxonomy, validation, response envelopes, geospatial helpers, uploads).
Keep feature-specific SQL and business logic in the corresponding feature
package (e.g. `cats/`).
"""
