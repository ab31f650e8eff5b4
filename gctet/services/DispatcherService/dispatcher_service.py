"""
DispatcherService backed by the Google Gen AI SDK.

Each user turn is answered either by the image model (when the prompt reads
like a diagram request) or by the text model with the recent conversation as
context. Image failures fall through to the text path; text failures end in a
fixed fallback message.
"""

from __future__ import annotations

import base64
import logging
import re
from collections.abc import Callable, Sequence
from typing import Any

from google import genai
from google.genai import types
from langfuse import observe

from gctet.entities.message import Attachment, ContextMessage, DispatchResult
from gctet.services.DispatcherService.dispatcher_service_interface import (
    DispatcherServiceInterface,
)
from gctet.services.DispatcherService.intent_classifier import KeywordIntentClassifier


DEFAULT_SYSTEM_INSTRUCTION = """You are GCT.ET, a specialized high-performance AI in Electrical Technology.
STRICT RULES:
1. NO Markdown (*, #, _, -).
2. Use <b>Tags</b> for Bold headings.
3. Use <i>Tags</i> for primary technical definitions.
4. Use <p>Tags</p> for all explanations.
5. Tone: Technical, Precise, Professional.
6. Use numbered lists (1., 2.) if needed."""

IMAGE_PROMPT_TEMPLATE = (
    "Create a professional, clear, high-contrast engineering diagram or schematic "
    "for: {prompt}. Use standard electrical symbols and labels. "
    "Black or dark background."
)

TRANSLATE_PROMPT_TEMPLATE = (
    "Translate precisely for Electrical Engineers into {language}. "
    "Maintain HTML tags (<b>, <i>, <p>): {text}"
)

IMAGE_SUCCESS_CONTENT = (
    "<b>Schematic Analysis Complete</b>"
    "<p>The requested diagram has been generated based on current electrical standards.</p>"
)

FALLBACK_CONTENT = "<p>Neural signal corrupted. Terminal failure.</p>"

PNG_DATA_URL_PREFIX = "data:image/png;base64,"

_MARKDOWN_PATTERN = re.compile(r"[#*_$\-]+")
_HTML_TAG_PATTERN = re.compile(r"</?[^>]+(>|$)")


def strip_markdown(text: str) -> str:
    """Remove residual markdown punctuation (# * _ $ -) from model output."""
    return _MARKDOWN_PATTERN.sub("", text)


def strip_html(text: str) -> str:
    return _HTML_TAG_PATTERN.sub("", text)


def split_data_url(data: str) -> str:
    """Return the encoded payload of a data URL, dropping the media-type prefix."""
    if "," in data:
        return data.split(",", 1)[1]
    return data


def _encode_inline(data: bytes | str) -> str:
    if isinstance(data, str):
        return data
    return base64.b64encode(data).decode("ascii")


class DispatcherService(DispatcherServiceInterface):
    """
    Conversation dispatcher for the GCT.ET persona.

    The Gen AI client is created once at bootstrap and injected here; the
    service itself holds no per-conversation state.
    """

    def __init__(
        self,
        client: genai.Client,
        logger: logging.Logger,
        text_model_name: str = "gemini-3-flash-preview",
        image_model_name: str = "gemini-2.5-flash-image",
        tts_model_name: str = "gemini-2.5-flash-preview-tts",
        voice_name: str = "Kore",
        temperature: float = 0.1,
        system_instruction: str = DEFAULT_SYSTEM_INSTRUCTION,
        intent_classifier: Callable[[str], bool] | None = None,
    ) -> None:
        self.client = client
        self.logger = logger
        self.text_model_name = text_model_name
        self.image_model_name = image_model_name
        self.tts_model_name = tts_model_name
        self.voice_name = voice_name
        self.temperature = temperature
        self.system_instruction = system_instruction
        self.intent_classifier: Callable[[str], bool] = (
            intent_classifier or KeywordIntentClassifier()
        )

        self.logger.info(
            "DispatcherService initialized. Text model: %s, Image model: %s",
            self.text_model_name,
            self.image_model_name,
        )

    def is_image_request(self, prompt: str) -> bool:
        return self.intent_classifier(prompt)

    @observe()
    async def dispatch(
        self,
        prompt: str,
        context: Sequence[ContextMessage],
        attachments: Sequence[Attachment] = (),
    ) -> DispatchResult:
        if self.is_image_request(prompt):
            image_result = await self._generate_image(prompt)
            if image_result is not None:
                return image_result
            self.logger.warning(
                "Image generation unavailable, answering with text instead"
            )

        return await self._generate_text(prompt, context, attachments)

    async def _generate_image(self, prompt: str) -> DispatchResult | None:
        """Return an image result, or None when no image could be produced."""
        try:
            response = await self.client.aio.models.generate_content(
                model=self.image_model_name,
                contents=[
                    types.Content(
                        role="user",
                        parts=[
                            types.Part.from_text(
                                text=IMAGE_PROMPT_TEMPLATE.format(prompt=prompt)
                            )
                        ],
                    )
                ],
            )
        except Exception as e:
            self.logger.warning("Image generation failed: %s", e, exc_info=True)
            return None

        for part in self._response_parts(response):
            inline_data = getattr(part, "inline_data", None)
            if inline_data is not None and inline_data.data:
                self.logger.info("Image generated by %s", self.image_model_name)
                return {
                    "content": IMAGE_SUCCESS_CONTENT,
                    "image_data": PNG_DATA_URL_PREFIX + _encode_inline(inline_data.data),
                    "is_image": True,
                }

        self.logger.warning("Image response contained no inline image data")
        return None

    def build_contents(
        self,
        prompt: str,
        context: Sequence[ContextMessage],
        attachments: Sequence[Attachment] = (),
    ) -> list[types.Content]:
        """Map the context window and the current turn to Gen AI contents."""
        contents: list[types.Content] = []

        for message in context:
            # The API only knows "user" and "model".
            role = "user" if message["role"] == "user" else "model"
            contents.append(
                types.Content(
                    role=role,
                    parts=[types.Part.from_text(text=message["content"])],
                )
            )

        parts = [types.Part.from_text(text=prompt)]
        for attachment in attachments:
            try:
                raw = base64.b64decode(split_data_url(attachment["data"]))
            except (ValueError, TypeError) as e:
                self.logger.warning("Failed to decode attachment: %s", e)
                continue
            parts.append(
                types.Part.from_bytes(data=raw, mime_type=attachment["mime_type"])
            )

        contents.append(types.Content(role="user", parts=parts))
        return contents

    async def _generate_text(
        self,
        prompt: str,
        context: Sequence[ContextMessage],
        attachments: Sequence[Attachment],
    ) -> DispatchResult:
        try:
            contents = self.build_contents(prompt, context, attachments)
            config = types.GenerateContentConfig(
                system_instruction=self.system_instruction,
                temperature=self.temperature,
            )

            response = await self.client.aio.models.generate_content(
                model=self.text_model_name,
                contents=contents,
                config=config,
            )

            text = response.text or ""
            if not text:
                self.logger.warning("Text model returned an empty response")

            return {"content": strip_markdown(text), "is_image": False}

        except Exception as e:
            self.logger.error("Error getting response from Gen AI: %s", e, exc_info=True)
            return {"content": FALLBACK_CONTENT, "is_image": False}

    @observe()
    async def translate(self, text: str, target_language: str) -> str | None:
        try:
            response = await self.client.aio.models.generate_content(
                model=self.text_model_name,
                contents=[
                    types.Content(
                        role="user",
                        parts=[
                            types.Part.from_text(
                                text=TRANSLATE_PROMPT_TEMPLATE.format(
                                    language=target_language, text=text
                                )
                            )
                        ],
                    )
                ],
            )
            return response.text
        except Exception as e:
            self.logger.error("Translation failed: %s", e, exc_info=True)
            return None

    @observe()
    async def synthesize_speech(self, text: str) -> str | None:
        try:
            config = types.GenerateContentConfig(
                response_modalities=["AUDIO"],
                speech_config=types.SpeechConfig(
                    voice_config=types.VoiceConfig(
                        prebuilt_voice_config=types.PrebuiltVoiceConfig(
                            voice_name=self.voice_name
                        )
                    )
                ),
            )

            response = await self.client.aio.models.generate_content(
                model=self.tts_model_name,
                contents=[
                    types.Content(
                        role="user",
                        parts=[types.Part.from_text(text=strip_html(text))],
                    )
                ],
                config=config,
            )

            parts = self._response_parts(response)
            inline_data = getattr(parts[0], "inline_data", None) if parts else None
            if inline_data is None or not inline_data.data:
                self.logger.warning("Speech response contained no audio")
                return None

            return _encode_inline(inline_data.data)

        except Exception as e:
            self.logger.error("Speech synthesis failed: %s", e, exc_info=True)
            return None

    @staticmethod
    def _response_parts(response: Any) -> list[Any]:
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            return []
        content = getattr(candidates[0], "content", None)
        return list(getattr(content, "parts", None) or [])
