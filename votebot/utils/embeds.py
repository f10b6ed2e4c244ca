"""
Embed building for the published vote leaderboard.

Keeps the message body layout in one place so the reconciliation engine only
hands over records and never formats text itself.
"""

from datetime import datetime
from typing import Optional, Sequence

import discord

from votebot.constants import UIConstants
from votebot.data_models.votes import LeaderboardRecord


def format_record(rank: int, record: LeaderboardRecord) -> str:
    """Format one leaderboard entry; rank is 1-based."""
    return (
        f"**{rank}.** {record.nickname}\n"
        f"**Votes:** {record.vote_count}\n"
        f"**Last Vote:** {record.last_activity_display}"
    )


def render_leaderboard(
    records: Sequence[LeaderboardRecord],
    max_length: int = UIConstants.MAX_DESCRIPTION_LENGTH
) -> str:
    """
    Render the ordered records as a numbered list.
    
    An empty ranking renders the fixed placeholder. Entries that would push
    the text past ``max_length`` are summarised in a trailing line instead.
    """
    if not records:
        return UIConstants.EMPTY_PLACEHOLDER
    
    blocks = []
    length = 0
    for index, record in enumerate(records):
        block = format_record(index + 1, record)
        remaining = len(records) - index - 1
        # Leave room for the summary line if later entries may still be cut
        reserve = len(_overflow_line(remaining)) + 2 if remaining else 0
        added = len(block) + (2 if blocks else 0)
        if length + added + reserve > max_length:
            blocks.append(_overflow_line(len(records) - index))
            break
        blocks.append(block)
        length += added
    
    return "\n\n".join(blocks)


def _overflow_line(hidden: int) -> str:
    return f"…and {hidden} more voter{'s' if hidden != 1 else ''}"


def _embed_title(entity_label: Optional[str]) -> str:
    title = entity_label or UIConstants.DEFAULT_TITLE
    if len(title) > UIConstants.MAX_TITLE_LENGTH:
        title = title[:UIConstants.MAX_TITLE_LENGTH - 1] + "…"
    return title


def build_vote_embed(
    records: Sequence[LeaderboardRecord],
    entity_label: Optional[str] = None,
    timestamp: Optional[datetime] = None
) -> discord.Embed:
    """
    Build the leaderboard embed.
    
    Args:
        records: Ordered leaderboard records
        entity_label: Server name reported by the provider
        timestamp: Time of the cycle that produced the records
        
    Returns:
        Embed ready to send or edit in place
    """
    embed = discord.Embed(
        title=_embed_title(entity_label),
        description=render_leaderboard(records),
        color=UIConstants.EMBED_COLOR,
        timestamp=timestamp,
    )
    embed.set_footer(text=UIConstants.FOOTER_TEXT)
    return embed
