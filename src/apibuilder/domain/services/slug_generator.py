"""Slug generator service.

Generates URL-friendly slugs from collection names and validates the path
segments collections are served under.
"""

import re
from dataclasses import dataclass

# Path segments owned by the application itself (management API lives at /api/v1).
RESERVED_ROUTE_PATHS = frozenset({"v1"})


@dataclass(frozen=True)
class SlugValidationError:
    """Represents a slug or path validation error.

    Attributes:
        field: The field name the error refers to.
        message: Human-readable error message.
        code: Machine-readable error code.
    """

    field: str
    message: str
    code: str


class SlugGenerator:
    """Generate slugs and validate route path segments.

    Slug rules:
    - Lowercase; characters outside a-z and 0-9 are not transliterated
    - Runs of non-alphanumeric characters collapse to a single hyphen
    - No leading or trailing hyphens
    """

    MAX_LENGTH = 64

    # Custom paths may keep case and underscores but must be a single segment.
    VALID_PATH_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

    @classmethod
    def generate(cls, text: str) -> str:
        """Generate a slug from text.

        Examples:
            >>> SlugGenerator.generate("Blog Posts")
            'blog-posts'
            >>> SlugGenerator.generate("  Test & Company, Inc. ")
            'test-company-inc'
            >>> SlugGenerator.generate("Café Menu")
            'caf-menu'
        """
        return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")

    @classmethod
    def normalize_path(cls, path: str | None) -> str | None:
        """Strip whitespace and surrounding slashes; blank paths become None."""
        if path is None:
            return None
        path = path.strip().strip("/")
        return path or None

    @classmethod
    def validate_path(cls, path: str, field: str = "slug") -> list[SlugValidationError]:
        """Validate a slug or custom path segment.

        Args:
            path: The segment to validate.
            field: Field name reported in errors.

        Returns:
            List of validation errors. Empty list if the segment is valid.
        """
        errors: list[SlugValidationError] = []

        if not path:
            errors.append(
                SlugValidationError(
                    field=field,
                    message="Path must contain at least one letter or digit",
                    code="path_empty",
                )
            )
            return errors

        if len(path) > cls.MAX_LENGTH:
            errors.append(
                SlugValidationError(
                    field=field,
                    message=f"Path must be at most {cls.MAX_LENGTH} characters",
                    code="path_too_long",
                )
            )

        if not cls.VALID_PATH_PATTERN.match(path):
            errors.append(
                SlugValidationError(
                    field=field,
                    message="Path must be a single segment of letters, digits, hyphens and underscores",
                    code="path_invalid_chars",
                )
            )

        if path.lower() in RESERVED_ROUTE_PATHS:
            errors.append(
                SlugValidationError(
                    field=field,
                    message=f"Path '{path}' is reserved",
                    code="path_reserved",
                )
            )

        return errors
