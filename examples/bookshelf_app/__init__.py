"""
Bookshelf sample application showcasing docmap request scoping.
"""

from .demo import DocumentStore, Repository, make_app, request, run_demo, seed_sample_data
from .models import Book, Writer

__all__ = [
    "Book",
    "Writer",
    "DocumentStore",
    "Repository",
    "make_app",
    "request",
    "run_demo",
    "seed_sample_data",
]
