"""Helpers to parse chat completion outputs into description results."""

import re
from typing import Any, Dict, List, Union

DESCRIPTION_PATTERN = re.compile(r"Description: (.*?)(?:\n|$)")
KEYWORDS_PATTERN = re.compile(r"Keywords: (.*?)(?:\n|$)")
TOKENS_USED_PATTERN = re.compile(r"Tokens used: (\d+)")


def parse_generated_text(content: str) -> Dict[str, Union[str, List[str], int]]:
    """Extract description, keywords and token count from marker lines.

    Missing markers fall back to an empty string, an empty list and zero.
    """
    content = content or ""
    description_match = DESCRIPTION_PATTERN.search(content)
    keywords_match = KEYWORDS_PATTERN.search(content)
    tokens_match = TOKENS_USED_PATTERN.search(content)

    keywords: List[str] = []
    if keywords_match:
        keywords = [keyword.strip() for keyword in keywords_match.group(1).split(",")]
        keywords = [keyword for keyword in keywords if keyword]

    return {
        "description": description_match.group(1).strip() if description_match else "",
        "keywords": keywords,
        "tokens_used": int(tokens_match.group(1)) if tokens_match else 0,
    }


def extract_message_content(data: Any) -> str:
    """Return `choices[0].message.content` from a chat completion JSON body."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ValueError("Completion response has no message content.") from exc
    if not isinstance(content, str):
        raise ValueError("Completion message content is not text.")
    return content
