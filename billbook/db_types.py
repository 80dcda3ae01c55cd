"""Database-agnostic type definitions for SQLAlchemy models.

This module provides type definitions that work with both SQLite and PostgreSQL.
"""
from sqlalchemy import Numeric, Uuid

# Native UUID on PostgreSQL, CHAR(32) on SQLite
UUIDType = Uuid

# Fixed-point money and rate columns; never Float
Money = Numeric(14, 2)
# Half of a 2-place GST rate needs a third place (0.25% -> 0.125% CGST)
Rate = Numeric(6, 3)
Quantity = Numeric(12, 3)
