"""
Shared, cross-cutting code for the API.

`core/` holds small building blocks that multiple features use (DB wiring,
env settings, logging, the hosted-LLM client, document parsing). Keep
feature-specific SQL and business logic in the corresponding feature package
(e.g. `applications/`, `scanning/`).
"""
