"""Tests for the Discord message transport adapter."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from votebot.data_models.votes import EditOutcome, MessageProbe
from votebot.services.message_transport import DiscordMessageTransport
from votebot.utils.sync_exceptions import TransportTransientFailure


def _http_error(cls, status, reason, code=0, message=""):
    response = MagicMock(status=status, reason=reason)
    return cls(response, {"code": code, "message": message})


UNKNOWN_MESSAGE = _http_error(discord.NotFound, 404, "Not Found", 10008, "Unknown Message")


def _transport(channel=None):
    channel = channel or MagicMock(spec=discord.TextChannel)
    client = MagicMock()
    client.get_channel.return_value = channel
    return DiscordMessageTransport(client, 42), channel, client


class TestFetchMessage:
    def test_found(self):
        transport, channel, _ = _transport()
        channel.fetch_message = AsyncMock(return_value=MagicMock(id=7))

        assert asyncio.run(transport.fetch_message(7)) is MessageProbe.FOUND
        channel.fetch_message.assert_awaited_once_with(7)

    def test_unknown_message_is_not_found(self):
        transport, channel, _ = _transport()
        channel.fetch_message = AsyncMock(side_effect=UNKNOWN_MESSAGE)

        assert asyncio.run(transport.fetch_message(7)) is MessageProbe.NOT_FOUND

    @pytest.mark.parametrize(
        "error",
        [
            _http_error(discord.HTTPException, 500, "Internal Server Error"),
            _http_error(discord.Forbidden, 403, "Forbidden", 50001, "Missing Access"),
            TimeoutError(),
            asyncio.TimeoutError(),
        ],
    )
    def test_other_errors_are_transient(self, error):
        transport, channel, _ = _transport()
        channel.fetch_message = AsyncMock(side_effect=error)

        assert asyncio.run(transport.fetch_message(7)) is MessageProbe.TRANSIENT_ERROR

    def test_missing_channel_is_transient(self):
        client = MagicMock()
        client.get_channel.return_value = None
        client.fetch_channel = AsyncMock(side_effect=_http_error(discord.NotFound, 404, "Not Found", 10003))
        transport = DiscordMessageTransport(client, 42)

        assert asyncio.run(transport.fetch_message(7)) is MessageProbe.TRANSIENT_ERROR


class TestSendAndEdit:
    def test_send_returns_message_id(self):
        transport, channel, _ = _transport()
        channel.send = AsyncMock(return_value=MagicMock(id=1234))
        embed = discord.Embed(title="Votes")

        assert asyncio.run(transport.send_message(embed)) == 1234
        channel.send.assert_awaited_once_with(embed=embed)

    def test_send_failure_raises_transient(self):
        transport, channel, _ = _transport()
        channel.send = AsyncMock(side_effect=_http_error(discord.HTTPException, 502, "Bad Gateway"))

        with pytest.raises(TransportTransientFailure):
            asyncio.run(transport.send_message(discord.Embed()))

    def test_edit_in_place(self):
        transport, channel, _ = _transport()
        partial = MagicMock()
        partial.edit = AsyncMock()
        channel.get_partial_message = MagicMock(return_value=partial)
        embed = discord.Embed(title="Votes")

        assert asyncio.run(transport.edit_message(7, embed)) is EditOutcome.EDITED
        channel.get_partial_message.assert_called_once_with(7)
        partial.edit.assert_awaited_once_with(embed=embed)

    def test_edit_deleted_message(self):
        transport, channel, _ = _transport()
        partial = MagicMock()
        partial.edit = AsyncMock(side_effect=UNKNOWN_MESSAGE)
        channel.get_partial_message = MagicMock(return_value=partial)

        assert asyncio.run(transport.edit_message(7, discord.Embed())) is EditOutcome.NOT_FOUND

    def test_channel_is_resolved_once(self):
        client = MagicMock()
        channel = MagicMock(spec=discord.TextChannel)
        channel.send = AsyncMock(return_value=MagicMock(id=1))
        client.get_channel.return_value = None
        client.fetch_channel = AsyncMock(return_value=channel)
        transport = DiscordMessageTransport(client, 42)

        async def scenario():
            await transport.send_message(discord.Embed())
            await transport.send_message(discord.Embed())

        asyncio.run(scenario())

        client.fetch_channel.assert_awaited_once_with(42)


def test_edit_timeout_raises_transient():
    transport, channel, _ = _transport()
    partial = MagicMock()
    partial.edit = AsyncMock(side_effect=asyncio.TimeoutError())
    channel.get_partial_message = MagicMock(return_value=partial)

    with pytest.raises(TransportTransientFailure):
        asyncio.run(transport.edit_message(7, discord.Embed()))
