"""
Documents for the docmap bookshelf example.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(eq=False)
class Writer:
    id: int
    name: str


@dataclass(eq=False)
class Book:
    id: int
    title: str
    writer_id: int
