"""
Field normalization applied to records before they are stored.
"""
from __future__ import annotations

# Identifier and company id columns are VARCHAR(24) in the canonical table
IDENTIFIER_SIZE = 24


class FieldNormalizer:
    """Pure helpers for cleaning text fields."""

    @staticmethod
    def strip_spaces(text: str | None) -> str:
        """
        Remove every space character from a text field.

        Args:
            text: Raw field value

        Returns:
            The value without spaces (empty string for None)
        """
        if text is None:
            return ""
        return text.replace(" ", "")

    @staticmethod
    def crop(text: str, size: int = IDENTIFIER_SIZE) -> str:
        """Return the first `size` characters of `text`."""
        if len(text) <= size:
            return text
        return text[:size]

    @classmethod
    def clean_identifier(cls, text: str | None) -> str:
        """Strip spaces and crop to the identifier column width."""
        return cls.crop(cls.strip_spaces(text), IDENTIFIER_SIZE)


strip_spaces = FieldNormalizer.strip_spaces
crop = FieldNormalizer.crop
