"""
Client side of the café directory.

Responsibilities:
- Talk to the directory HTTP API asynchronously (httpx).
- Map error responses onto validation / auth / generic failures.
- Hold the fetched collection and run the query pipeline locally.
- Drop responses to requests that a newer request has superseded.
"""
