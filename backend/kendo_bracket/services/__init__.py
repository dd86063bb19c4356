"""
Services Layer

Bracket engine and its collaborators:
- Engine functions take a Tournament value and return a new one
- Only snapshot_store touches the database
- Nothing here depends on HTTP request/response objects
"""
