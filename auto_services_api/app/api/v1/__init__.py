"""
Version 1 of the API.

This subpackage bundles all endpoints for the first public version of
the marketplace API.  Breaking changes should be introduced in new
version subpackages (e.g. ``v2``) to preserve backwards compatibility.
"""
