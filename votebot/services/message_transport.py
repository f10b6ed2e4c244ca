"""
Messaging transport for the live leaderboard message.

``MessageTransport`` is the narrow surface the reconciliation engine uses;
``DiscordMessageTransport`` implements it on top of a discord.py client for
one configured channel.

Error mapping: only ``discord.NotFound`` (HTTP 404, e.g. "Unknown Message")
means the message is gone. Permission errors, other HTTP errors, an
unresolvable channel and connection problems are treated as transient so a
flaky read never causes a duplicate post.
"""

import asyncio
from typing import Optional, Protocol

import aiohttp
import discord

from votebot.data_models.votes import EditOutcome, MessageProbe
from votebot.utils.logger import setup_logger
from votebot.utils.sync_exceptions import TransportTransientFailure

logger = setup_logger(__name__)

# Errors that say nothing about whether the message exists
_TRANSIENT_ERRORS = (discord.HTTPException, aiohttp.ClientError, asyncio.TimeoutError, TimeoutError)


class MessageTransport(Protocol):
    async def send_message(self, embed: discord.Embed) -> int:
        """Post a new message and return its id."""
        ...

    async def edit_message(self, message_id: int, embed: discord.Embed) -> EditOutcome:
        """Replace the body of an existing message."""
        ...

    async def fetch_message(self, message_id: int) -> MessageProbe:
        """Check whether a previously published message still exists."""
        ...


class DiscordMessageTransport:
    """Sends, edits and probes messages in a single Discord channel."""

    def __init__(self, client: discord.Client, channel_id: int):
        self.client = client
        self.channel_id = channel_id
        self._channel: Optional[discord.abc.Messageable] = None

    async def _resolve_channel(self) -> discord.abc.Messageable:
        if self._channel is not None:
            return self._channel

        channel = self.client.get_channel(self.channel_id)
        if channel is None:
            try:
                channel = await self.client.fetch_channel(self.channel_id)
            except discord.NotFound as e:
                raise TransportTransientFailure("resolve_channel", f"channel {self.channel_id} not found") from e
            except _TRANSIENT_ERRORS as e:
                raise TransportTransientFailure("resolve_channel", str(e)) from e

        if not isinstance(channel, discord.abc.Messageable):
            raise TransportTransientFailure("resolve_channel", f"channel {self.channel_id} is not messageable")

        self._channel = channel
        return channel

    async def send_message(self, embed: discord.Embed) -> int:
        channel = await self._resolve_channel()
        try:
            message = await channel.send(embed=embed)
        except _TRANSIENT_ERRORS as e:
            raise TransportTransientFailure("send_message", str(e)) from e
        return message.id

    async def edit_message(self, message_id: int, embed: discord.Embed) -> EditOutcome:
        channel = await self._resolve_channel()
        # Partial messages edit by id without a second fetch
        partial = channel.get_partial_message(message_id)
        try:
            await partial.edit(embed=embed)
        except discord.NotFound:
            return EditOutcome.NOT_FOUND
        except _TRANSIENT_ERRORS as e:
            raise TransportTransientFailure("edit_message", str(e)) from e
        return EditOutcome.EDITED

    async def fetch_message(self, message_id: int) -> MessageProbe:
        try:
            channel = await self._resolve_channel()
        except TransportTransientFailure as e:
            logger.warning(f"Cannot probe message {message_id}: {e}")
            return MessageProbe.TRANSIENT_ERROR

        try:
            await channel.fetch_message(message_id)
        except discord.NotFound:
            return MessageProbe.NOT_FOUND
        except _TRANSIENT_ERRORS as e:
            logger.warning(f"Transient error probing message {message_id}: {e}")
            return MessageProbe.TRANSIENT_ERROR
        return MessageProbe.FOUND
