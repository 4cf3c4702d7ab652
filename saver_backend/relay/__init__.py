"""
The `relay` package gates writes of chat sessions and chat messages.

Contents
--------
- errors: typed error taxonomy with HTTP status and user-facing detail
- session_resolver: `Identity`, `SessionResolver` and the cookie-token resolver
- record_store: `RecordStore` interface and the SQL-backed store
- gated_store: `GatedRecordStore`, the wrapper that checks blocking flags
- access: `is_admin`, the single admin authorization predicate
"""
