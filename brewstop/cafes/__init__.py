"""
Café directory service.

Responsibilities:
- Define café and review records and their submission schemas.
- Store cafés and reviews in-process, seeded from bundled CSV data.
- Serve name/address search and exact amenity-flag filtering.
- Keep each café's aggregate ratings in step with its reviews.
"""
