"""
Services module - the credential lifecycle and sync core.

- credential_store: CalendarConnection persistence
- event_mirror: ExternalEvent snapshot persistence
- oauth_flow: authorization URL and code exchange
- sync_engine: fetch and reconcile upcoming events
- connection_manager: the operations exposed to the HTTP layer
"""
