import base64
import io
import re
import wave

_PARAGRAPH_CLOSE = re.compile(r"</p\s*>", re.IGNORECASE)
_PARAGRAPH_OPEN = re.compile(r"<p(\s[^>]*)?>", re.IGNORECASE)
_LINE_BREAK = re.compile(r"<br\s*/?>", re.IGNORECASE)
# Telegram's HTML mode rejects tags it does not know; keep only b/i.
_UNSUPPORTED_TAG = re.compile(r"</?(?!(?:b|i)\s*>)[a-zA-Z][^>]*>")
_EXTRA_NEWLINES = re.compile(r"\n{3,}")

TELEGRAM_MESSAGE_LIMIT = 4096

TTS_SAMPLE_RATE = 24000
TTS_SAMPLE_WIDTH = 2
TTS_CHANNELS = 1


def to_telegram_html(content: str) -> str:
    """Convert assistant markup (<b>, <i>, <p>) into Telegram-compatible HTML."""
    text = _PARAGRAPH_CLOSE.sub("\n\n", content)
    text = _PARAGRAPH_OPEN.sub("\n", text)
    text = _LINE_BREAK.sub("\n", text)
    text = _UNSUPPORTED_TAG.sub("", text)
    text = _EXTRA_NEWLINES.sub("\n\n", text)
    return text.strip()


def split_message(text: str, limit: int = TELEGRAM_MESSAGE_LIMIT) -> list[str]:
    """
    Break text into chunks Telegram accepts, preferring line boundaries.

    A single line longer than the limit is cut at the limit.
    """
    if limit <= 0:
        raise ValueError("limit must be positive")

    chunks: list[str] = []
    current = ""
    for line in text.splitlines(keepends=True):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        if len(current) + len(line) > limit:
            chunks.append(current)
            current = ""
        current += line
    if current:
        chunks.append(current)

    return [chunk.strip() for chunk in chunks if chunk.strip()]


def decode_data_url(data: str) -> bytes:
    payload = data.split(",", 1)[1] if "," in data else data
    return base64.b64decode(payload)


def pcm_to_wav(pcm_base64: str) -> bytes:
    """Wrap the raw 24 kHz / 16-bit / mono PCM returned by the TTS model in a WAV container."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(TTS_CHANNELS)
        wav_file.setsampwidth(TTS_SAMPLE_WIDTH)
        wav_file.setframerate(TTS_SAMPLE_RATE)
        wav_file.writeframes(base64.b64decode(pcm_base64))
    return buffer.getvalue()
