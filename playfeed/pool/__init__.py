"""Bounded pool of content surfaces: admission, eviction and active switching.

Kept free of FastAPI concerns so it can be driven by API routes, the feed
window helper, and tests alike.
"""
