from __future__ import annotations

import base64
import html
import logging
from io import BytesIO
from typing import Any

from telethon import TelegramClient, events

from gctet.entities.catalog import (
    ELECTRICAL_TEMPLATES,
    SUPPORTED_LANGUAGES,
    resolve_language,
)
from gctet.entities.message import Attachment, DispatchResult
from gctet.services.ChatSessionService.chat_session_service_interface import (
    ChatSessionServiceInterface,
)
from gctet.services.ProfileService.profile_service_interface import (
    ProfileServiceInterface,
)
from gctet.services.TelegramService.telegram_formatting import (
    decode_data_url,
    pcm_to_wav,
    split_message,
    to_telegram_html,
)
from gctet.services.TelegramService.telegram_service_interface import (
    TelegramServiceInterface,
)


class ImageProcessingError(Exception):
    """Base error for attachment processing failures."""


class ImageTooLargeError(ImageProcessingError):
    def __init__(self, size_bytes: int) -> None:
        self.size_bytes = size_bytes
        super().__init__(f"Attachment exceeds size limit: {size_bytes} bytes")


class UnsupportedImageError(ImageProcessingError):
    def __init__(self, mime_type: str | None) -> None:
        self.mime_type = mime_type
        super().__init__(f"Unsupported mime type: {mime_type}")


class ImageDownloadError(ImageProcessingError):
    """Raised when a Telegram attachment cannot be downloaded."""


class TelegramService(TelegramServiceInterface):
    _MAX_IMAGE_BYTES: int = 5 * 1024 * 1024

    def __init__(
        self,
        command_prefix: str,
        telegram_client: TelegramClient,
        logger: logging.Logger,
        chat_sessions: ChatSessionServiceInterface,
        profile_service: ProfileServiceInterface,
        bot_token: str,
    ) -> None:
        self.logger: logging.Logger = logger
        self.bot: TelegramClient = telegram_client
        self.me: Any | None = None
        self.command_prefix: str = command_prefix.lower()
        self.chat_sessions = chat_sessions
        self.profile_service = profile_service
        self.bot_token = bot_token
        self.logger.info(
            "TelegramService initialized with command prefix '%s'",
            self.command_prefix,
        )

    @classmethod
    async def create(
        cls,
        command_prefix: str,
        telegram_client: TelegramClient,
        logger: logging.Logger,
        chat_sessions: ChatSessionServiceInterface,
        profile_service: ProfileServiceInterface,
        bot_token: str,
    ) -> TelegramService:
        """Factory to perform async setup steps before returning the service."""
        service = cls(
            command_prefix=command_prefix,
            telegram_client=telegram_client,
            logger=logger,
            chat_sessions=chat_sessions,
            profile_service=profile_service,
            bot_token=bot_token,
        )
        service.bot.add_event_handler(service._my_event_handler, events.NewMessage)
        return service

    async def start(self) -> None:
        self.logger.info("Starting Telegram bot...")
        await self.bot.start(bot_token=self.bot_token)
        self.me = await self.bot.get_me()
        self.logger.info("Telegram bot started.")
        await self.bot.run_until_disconnected()

    async def _my_event_handler(self, event) -> None:
        if not self._should_respond(event):
            self.logger.debug("Ignoring message: %s", event.raw_text)
            return

        raw_message: str = (event.raw_text or "").strip()
        if raw_message.lower().startswith(self.command_prefix):
            raw_message = raw_message[len(self.command_prefix) :].strip()

        command, _, argument = raw_message.partition(" ")
        command = command.lower()
        argument = argument.strip()

        if command == "/help" or command == "/start":
            await self._handle_help_command(event)
        elif command == "/templates":
            await self._handle_templates_command(event)
        elif command == "/template":
            await self._handle_template_command(event, argument)
        elif command == "/reset":
            await self._handle_reset_command(event)
        elif command == "/translate":
            await self._handle_translate_command(event, argument)
        elif command == "/speak":
            await self._handle_speak_command(event)
        elif command == "/profile":
            await self._handle_profile_command(event, argument)
        elif command == "/forget":
            await self._handle_forget_command(event)
        else:
            await self._handle_turn(event, raw_message)

    def _should_respond(self, event) -> bool:
        if getattr(event, "is_private", False):
            return True

        message_text = (event.raw_text or "").strip().lower()
        return message_text.startswith(self.command_prefix)

    async def _handle_turn(self, event, prompt: str) -> None:
        session = self.chat_sessions.get_session(event.chat_id)
        if session.is_busy:
            self.logger.debug("Chat %s is busy, ignoring message", event.chat_id)
            return

        message = getattr(event, "message", None) or event

        try:
            attachments = await self._collect_image_attachments(message, strict=True)
        except ImageTooLargeError as error:
            self.logger.warning("Received oversized image (%s bytes)", error.size_bytes)
            await event.reply("The image exceeds the 5 MB limit. Please send a smaller file.")
            return
        except UnsupportedImageError as error:
            self.logger.info(
                "Unsupported attachment with mime type: %s",
                error.mime_type or "unknown",
            )
            await event.reply("Only image attachments (image/*) can be analysed.")
            return
        except ImageDownloadError as error:
            self.logger.error("Failed to download image: %s", error)
            await event.reply("The image could not be downloaded. Please send it again.")
            return

        async with self.bot.action(event.chat_id, "typing"):
            result = await session.submit_turn(prompt, attachments)

        if result is None:
            return

        await self._send_result(event, result)

    async def _send_result(self, event, result: DispatchResult) -> None:
        caption = to_telegram_html(result["content"])
        image_data = result.get("image_data")

        if result["is_image"] and image_data:
            image = BytesIO(decode_data_url(image_data))
            image.name = "diagram.png"
            await self.bot.send_file(
                event.chat_id,
                file=image,
                caption=caption,
                parse_mode="html",
                reply_to=event.id,
            )
            return

        await self._reply_html(event, caption or "…")

    async def _reply_html(self, event, text: str) -> None:
        for chunk in split_message(text):
            await event.reply(chunk, parse_mode="html")

    async def _collect_image_attachments(
        self, message, *, strict: bool
    ) -> list[Attachment]:
        if not getattr(message, "download_media", None):
            self.logger.debug("Message has no media to download.")
            return []

        media = getattr(message, "media", None)
        has_photo = (
            getattr(message, "photo", None) is not None
            or getattr(media, "photo", None) is not None
        )

        if not media and not has_photo:
            return []

        document = getattr(media, "document", None) if media else None
        mime_type = getattr(document, "mime_type", None) if document else None

        if not has_photo and document is None:
            self.logger.debug("Media is not a photo or document.")
            return []

        if not mime_type and has_photo:
            mime_type = "image/jpeg"

        if mime_type is None or not mime_type.startswith("image/"):
            if strict:
                raise UnsupportedImageError(mime_type)
            self.logger.info("Skipping non-image attachment with mime type: %s", mime_type)
            return []

        buffer = BytesIO()
        try:
            await message.download_media(file=buffer)
        except Exception as exc:
            if strict:
                raise ImageDownloadError from exc
            self.logger.warning("Failed to download attachment: %s", exc)
            return []

        data = buffer.getvalue()
        size_bytes = len(data)

        if size_bytes == 0:
            if strict:
                raise ImageDownloadError("Empty attachment")
            return []

        if size_bytes > self._MAX_IMAGE_BYTES:
            if strict:
                raise ImageTooLargeError(size_bytes)
            self.logger.warning("Skipping oversized attachment (%s bytes)", size_bytes)
            return []

        encoded = base64.b64encode(data).decode("ascii")
        self.logger.info("Collected image attachment (%s bytes)", size_bytes)
        return [{"data": f"data:{mime_type};base64,{encoded}", "mime_type": mime_type}]

    async def _handle_help_command(self, event) -> None:
        """Sends a help message explaining how to use the bot."""
        languages = ", ".join(SUPPORTED_LANGUAGES)
        help_message = (
            "<b>GCT.ET Electrical Technology AI Unit</b>\n\n"
            "Send a question, optionally with a photo of a circuit or nameplate. "
            "Ask for a diagram or schematic to get a generated drawing.\n\n"
            "/templates - starter questions\n"
            "/template &lt;n&gt; - ask starter question n\n"
            f"/translate &lt;language&gt; - translate the last reply ({languages})\n"
            "/speak - voice rendition of the last reply\n"
            "/profile [name | email | city] - show or create your engineer profile\n"
            "/forget - delete your engineer profile\n"
            "/reset - clear this conversation\n\n"
            f"In groups, start your message with {self.command_prefix}."
        )
        await event.reply(help_message, parse_mode="html")

    async def _handle_templates_command(self, event) -> None:
        lines = [
            f"{index}. {template}"
            for index, template in enumerate(ELECTRICAL_TEMPLATES, start=1)
        ]
        await event.reply("Starter questions:\n" + "\n".join(lines))

    async def _handle_template_command(self, event, argument: str) -> None:
        if not argument.isdigit() or not 1 <= int(argument) <= len(ELECTRICAL_TEMPLATES):
            await event.reply(
                f"Choose a template between 1 and {len(ELECTRICAL_TEMPLATES)}."
            )
            return
        await self._handle_turn(event, ELECTRICAL_TEMPLATES[int(argument) - 1])

    async def _handle_reset_command(self, event) -> None:
        session = self.chat_sessions.get_session(event.chat_id)
        if not session.reset():
            await event.reply("A request is still in progress. Try again when it settles.")
            return
        await event.reply("Conversation cleared.")

    async def _handle_translate_command(self, event, argument: str) -> None:
        language = resolve_language(argument)
        if language is None:
            await event.reply(
                "Usage: /translate <language>. Supported: "
                + ", ".join(SUPPORTED_LANGUAGES)
            )
            return

        session = self.chat_sessions.get_session(event.chat_id)
        async with self.bot.action(event.chat_id, "typing"):
            translation = await session.translate_last_reply(language)

        if not translation:
            self.logger.info("No translation produced for chat %s", event.chat_id)
            await event.reply("Nothing to translate right now.")
            return

        await self._reply_html(event, to_telegram_html(translation))

    async def _handle_speak_command(self, event) -> None:
        session = self.chat_sessions.get_session(event.chat_id)
        async with self.bot.action(event.chat_id, "record-audio"):
            audio = await session.speak_last_reply()

        if not audio:
            await event.reply("No audio could be produced for the last reply.")
            return

        voice = BytesIO(pcm_to_wav(audio))
        voice.name = "gctet_reply.wav"
        await self.bot.send_file(event.chat_id, file=voice, reply_to=event.id)

    async def _handle_profile_command(self, event, argument: str) -> None:
        user_id = event.sender_id
        message = getattr(event, "message", None) or event

        try:
            if argument:
                name, details = self._parse_profile_argument(argument)
                self.profile_service.create_profile(user_id, name, **details)

            pictures = await self._collect_image_attachments(message, strict=False)
            if pictures and not self.profile_service.update_picture(
                user_id, pictures[0]["data"]
            ):
                await event.reply("Create a profile first: /profile <name>")
                return
        except ValueError as error:
            await event.reply(str(error))
            return

        profile = self.profile_service.get_profile(user_id)
        if profile is None:
            await event.reply("No profile yet. Create one with /profile <name>")
            return

        lines = [
            "<b>Engineer Profile</b>",
            f"Name: {html.escape(profile['name'])}",
            f"ID: {profile['id_number']}",
        ]
        if profile.get("email"):
            lines.append(f"Email: {html.escape(profile['email'])}")
        if profile.get("city"):
            lines.append(f"City: {html.escape(profile['city'])}")
        lines.append(f"Picture: {'set' if profile['profile_pic'] else 'not set'}")
        await event.reply("\n".join(lines), parse_mode="html")

    @staticmethod
    def _parse_profile_argument(argument: str) -> tuple[str, dict[str, str]]:
        """Split "name | email | city" into the name and the optional fields."""
        fields = [field.strip() for field in argument.split("|")]
        if len(fields) > 3:
            raise ValueError("Usage: /profile <name> | <email> | <city>")

        name = fields[0]
        details = dict(zip(("email", "city"), fields[1:]))
        email = details.get("email")
        if email and "@" not in email:
            raise ValueError(f"Not an email address: {email}")
        return name, details

    async def _handle_forget_command(self, event) -> None:
        if self.profile_service.get_profile(event.sender_id) is None:
            await event.reply("No profile to delete.")
            return
        self.profile_service.delete_profile(event.sender_id)
        await event.reply("Profile deleted.")
