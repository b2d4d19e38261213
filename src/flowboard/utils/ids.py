"""Identifier generation."""

import uuid


def new_id() -> str:
    """Generate a document identifier."""
    return uuid.uuid4().hex
