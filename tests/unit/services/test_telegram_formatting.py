import base64
import io
import wave

from gctet.services.TelegramService.telegram_formatting import (
    TTS_SAMPLE_RATE,
    decode_data_url,
    pcm_to_wav,
    split_message,
    to_telegram_html,
)


def test_paragraphs_become_line_breaks() -> None:
    content = "<b>Ohm's Law</b><p>V equals I times R.</p><p>It is linear.</p>"

    assert to_telegram_html(content) == (
        "<b>Ohm's Law</b>\nV equals I times R.\n\nIt is linear."
    )


def test_only_bold_and_italic_survive() -> None:
    content = '<p><i>Voltage</i> is <span class="x">potential</span><br/>difference</p>'

    assert to_telegram_html(content) == "<i>Voltage</i> is potential\ndifference"


def test_tags_with_b_or_i_prefix_are_removed() -> None:
    assert to_telegram_html("<big>x</big><img src='a'>") == "x"


def test_decode_data_url() -> None:
    assert decode_data_url("data:image/png;base64,QUJD") == b"ABC"
    assert decode_data_url("QUJD") == b"ABC"


def test_pcm_to_wav_wraps_raw_audio() -> None:
    pcm = b"\x00\x01" * 480
    wav_bytes = pcm_to_wav(base64.b64encode(pcm).decode("ascii"))

    with wave.open(io.BytesIO(wav_bytes), "rb") as wav_file:
        assert wav_file.getframerate() == TTS_SAMPLE_RATE
        assert wav_file.getnchannels() == 1
        assert wav_file.getsampwidth() == 2
        assert wav_file.readframes(wav_file.getnframes()) == pcm


def test_split_message_keeps_short_text_whole() -> None:
    assert split_message("<b>Ohm's Law</b>\nV = IR") == ["<b>Ohm's Law</b>\nV = IR"]
    assert split_message("") == []


def test_split_message_breaks_on_line_boundaries() -> None:
    text = "first line\nsecond line\nthird"

    assert split_message(text, limit=24) == ["first line\nsecond line", "third"]


def test_split_message_cuts_overlong_lines() -> None:
    chunks = split_message("a" * 10, limit=4)

    assert chunks == ["aaaa", "aaaa", "aa"]
