from typing import Literal

AppLanguage = Literal["English", "Urdu", "Hindi", "Punjabi", "Pashto", "Chinese"]

# Language name sent to the model -> native display name.
SUPPORTED_LANGUAGES: dict[str, str] = {
    "English": "English",
    "Urdu": "اردو",
    "Hindi": "हिन्दी",
    "Punjabi": "ਪੰਜਾਬੀ",
    "Pashto": "پښتو",
    "Chinese": "中文",
}

ELECTRICAL_TEMPLATES: tuple[str, ...] = (
    "What is electric current?",
    "Define Voltage and potential difference",
    "What is Power Factor and how to improve it?",
    "Importance of Earthing in electrical systems",
    "Explain the working of a Refrigerator",
    "Generate a diagram of a simple series circuit",
)


def resolve_language(name: str) -> str | None:
    """Return the canonical language name for a case-insensitive match, if any."""
    wanted = name.strip().lower()
    for language in SUPPORTED_LANGUAGES:
        if language.lower() == wanted:
            return language
    return None
