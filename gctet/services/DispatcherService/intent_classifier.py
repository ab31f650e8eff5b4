from collections.abc import Iterable


DEFAULT_IMAGE_KEYWORDS: tuple[str, ...] = (
    "diagram",
    "draw",
    "image",
    "picture",
    "visualize",
    "create a photo",
    "generate a diagram",
    "circuit diagram",
    "schematic",
)


class KeywordIntentClassifier:
    """
    Decide whether a prompt asks for a generated image.

    Plain case-insensitive substring test against a keyword list, so
    "pictures" or "imagery" also match. An empty keyword list never matches.
    """

    def __init__(self, keywords: Iterable[str] = DEFAULT_IMAGE_KEYWORDS) -> None:
        self.keywords: tuple[str, ...] = tuple(
            keyword.strip().lower() for keyword in keywords if keyword.strip()
        )

    def __call__(self, prompt: str) -> bool:
        text = (prompt or "").lower()
        return any(keyword in text for keyword in self.keywords)
