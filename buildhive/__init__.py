"""BuildHive storefront client: session, cart mirror and checkout over the marketplace REST API."""
from __future__ import annotations

__version__ = "0.1.0"
