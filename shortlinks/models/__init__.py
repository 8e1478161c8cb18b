"""
Database models for the short links service.

A single table: short_links. Rows are created out-of-band (schema.sql seed
data or an external admin process); this service only reads them and bumps
click_count.
"""

from .short_link import ShortLink

__all__ = ["ShortLink"]
