import re

SCRIPT_TAG_PATTERN = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
HTML_TAG_PATTERN = re.compile(r"<[^>]*>")
MAX_INPUT_LENGTH = 1000


def clean_text(text: str) -> str:
    return ' '.join(text.split())


def sanitize_input(text: str) -> str:
    """Strip script blocks and HTML tags from user input and collapse whitespace"""
    text = SCRIPT_TAG_PATTERN.sub("", text.strip())
    text = HTML_TAG_PATTERN.sub("", text)
    return clean_text(text)[:MAX_INPUT_LENGTH]
