"""Engine layer — Clients for the search backend.

Built-in clients:
  - elasticsearch: Elasticsearch v8 through the official async client

Implement ``EngineClient`` to talk to another backend (or to fake one in
tests).
"""
