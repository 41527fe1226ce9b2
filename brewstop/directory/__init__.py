"""
Directory query pipeline.

Responsibilities:
- Compute great-circle distances between cafés and a reference point.
- Resolve the reference point from an injected location provider.
- Filter a café collection by free text and amenity tags.
- Rank the survivors by distance, nearest first.
"""
