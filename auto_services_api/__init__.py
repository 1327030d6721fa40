"""
Top‑level package for the Auto Services Marketplace API.

This file makes ``auto_services_api`` a Python package so that
modules within ``app`` can be imported using fully qualified names
like ``auto_services_api.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
