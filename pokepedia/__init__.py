"""
pokepedia: one-shot PokeAPI to document-store ingestion job.

Walks the PokeAPI species catalog, resolves each species together with its
default variety, evolution chain and shared sub-resources, and inserts one
denormalized document per species.
"""

__version__ = "1.0.0"
