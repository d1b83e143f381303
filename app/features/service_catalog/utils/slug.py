import re

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")


def slugify(value: str) -> str:
    """Lower-case ``value`` and collapse every run of non-alphanumerics into one hyphen."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower())
    return slug.strip("-")
