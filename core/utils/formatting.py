"""Formatting utilities for job listings."""

import re

# Slug column is String(300); leave room for a numeric suffix
MAX_SLUG_LENGTH = 280


def slugify(text: str) -> str:
    """
    Convert text to URL-safe slug.

    Args:
        text: Text to convert

    Returns:
        URL-safe slug, ``job`` when nothing usable remains
    """
    text = text.lower()

    # Replace spaces and underscores with hyphens
    text = re.sub(r'[\s_]+', '-', text)

    # Remove non-alphanumeric characters except hyphens
    text = re.sub(r'[^a-z0-9-]', '', text)

    text = re.sub(r'-+', '-', text).strip('-')

    return text[:MAX_SLUG_LENGTH].rstrip('-') or "job"
