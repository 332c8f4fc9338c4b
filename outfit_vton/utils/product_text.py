"""Utility to clean retail product titles before they go into a prompt."""

import re


# Marketing/noise phrases to remove
NOISE_PHRASES = [
    # Marketing
    r'\bnew arrivals?\b',
    r'\bbest sellers?\b',
    r'\bon sale\b',
    r'\blimited edition\b',
    r'\bfree shipping\b',
    r'\bfree returns\b',
    r'\bmust.have\b',
    # Shop UI leftovers
    r'\badd to (?:cart|bag)\b',
    r'\bsize guide\b',
    # Article numbers
    r'\bart\.?\s*no\.?:?\s*\d+',
    r'\bsku:?\s*[\w-]+',
    r'\bstyle\s*#\s*[\w-]+',
    r'\bitem\s*#?\s*\d+',
]

MAX_NAME_LENGTH = 120


def clean_product_name(raw_name: str) -> str:
    """Strip marketing noise and separators from a product title.

    Falls back to the trimmed original when cleaning would leave nothing,
    so the prompt always names the item.
    """
    if not raw_name:
        return "clothing item"

    text = raw_name
    for pattern in NOISE_PHRASES:
        text = re.sub(pattern, ' ', text, flags=re.IGNORECASE)

    # Normalize separators
    text = re.sub(r'\s*[|•·]\s*', ', ', text)
    text = re.sub(r'\s*,\s*(,\s*)+', ', ', text)
    text = re.sub(r'\s+', ' ', text)
    text = text.strip(' ,-–')

    if not text:
        text = raw_name.strip()

    if len(text) > MAX_NAME_LENGTH:
        text = text[:MAX_NAME_LENGTH].rsplit(' ', 1)[0]

    return text
