"""Schema models and checks: field schema parsing, Location Protocol
conformance, canonical v0.1 constants and record models.
"""

__all__ = ["conformance", "fields", "location_v1", "records"]
