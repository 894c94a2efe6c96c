"""Prompt builders for image description and keyword generation."""

MIN_KEYWORDS = 40
MAX_KEYWORDS = 50
MAX_DESCRIPTION_CHARS = 200


def build_description_prompt(
    min_keywords: int = MIN_KEYWORDS,
    max_keywords: int = MAX_KEYWORDS,
    max_description_chars: int = MAX_DESCRIPTION_CHARS,
) -> str:
    """Return the fixed instruction sent alongside every image."""
    return (
        f"Generate a description and keywords (minimum {min_keywords}, maximum {max_keywords}) "
        "for an image with no mention of trademarks. "
        f"The description should be concise (up to {max_description_chars} characters). "
        "Keywords should follow SEO best practices and be in 1-word format, "
        "as relevant to the image as possible. "
        "Answer using exactly these lines:\n"
        "Description: <description>\n"
        "Keywords: <keyword>, <keyword>, ..."
    )
