"""
Storefront Core

Client-side core of the storefront:
- cart: persisted cart store, totals and async controller
- catalog: product models, TTL read-through cache and HTTP client
- storage: key/value backends (memory, file, Upstash Redis)
- preferences: recently viewed products and display settings
"""

__all__ = [
    "cart",
    "catalog",
    "config",
    "storage",
    "preferences",
]
