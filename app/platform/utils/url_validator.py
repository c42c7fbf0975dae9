from typing import Optional, Tuple
from urllib.parse import urlparse

from app.platform.errors import InvalidInput


def normalize_url(url: str) -> Tuple[str, bool]:

    url = url.strip()

    # "localhost:3000" parses with scheme "localhost", so test for "://"
    if "://" not in url:
        return f"https://{url}", True

    return url, False


def require_valid_url(url: Optional[str]) -> str:
    """
    Return the normalized URL or raise InvalidInput.

    Bare hosts ("example.com") are upgraded to https.
    """
    if not url or not url.strip():
        raise InvalidInput("Missing URL")

    normalized_url, _ = normalize_url(url)
    parsed = urlparse(normalized_url)

    if parsed.scheme not in ("http", "https"):
        raise InvalidInput(
            f"Invalid URL scheme: {parsed.scheme} (must be http or https)",
            details={"url": url},
        )
    if not parsed.netloc:
        raise InvalidInput("Invalid URL format: missing domain", details={"url": url})

    return normalized_url
