"""Content surfaces: sandboxed documents the pool creates, instructs and releases.

`base` holds the capability the pool manager depends on; concrete surfaces
(Playwright pages) live next to it and never import the pool.
"""
