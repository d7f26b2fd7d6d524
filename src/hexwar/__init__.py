"""Hexwar: a turn-based territorial conquest engine on a hexagonal grid."""

__version__ = "0.1.0"
