"""
Vote Tracker Cog - Background Sync Loop & Admin Command

Owns the scheduler task that keeps the live vote leaderboard message in sync,
and provides an owner-only command to run a cycle on demand.
"""

import asyncio
from datetime import datetime, timezone
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from votebot.config import Config
from votebot.services.scheduler import SyncScheduler
from votebot.services.vote_sync import VoteSyncService
from votebot.utils.logger import setup_logger

logger = setup_logger(__name__)


class VoteTrackerCog(commands.Cog):
    """Keeps the published vote leaderboard in sync"""
    
    def __init__(self, bot):
        self.bot = bot
        self.sync_service = VoteSyncService(bot.sync_context)
        self.scheduler = SyncScheduler(
            self.sync_service.run_cycle,
            bot.sync_context.settings.interval_seconds,
            health=bot.health_monitor,
        )
        self._task: Optional[asyncio.Task] = None
        self.logger = logger
    
    @commands.Cog.listener()
    async def on_ready(self):
        """Start the sync loop once; on_ready fires again after reconnects"""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.scheduler.run_forever(), name="vote-sync")
            self.logger.info("VoteTrackerCog: vote monitoring started")
    
    def cog_unload(self):
        """Stop the sync loop when the cog is unloaded"""
        self.scheduler.stop()
        if self._task:
            self._task.cancel()
        self.logger.info("VoteTrackerCog: vote monitoring stopped")
    
    @app_commands.command(
        name="admin-sync-votes",
        description="Refresh the vote leaderboard now (Owner only)"
    )
    async def admin_sync_votes(self, interaction: discord.Interaction):
        """Slash command to run one sync cycle immediately"""
        if interaction.user.id != Config.OWNER_DISCORD_ID:
            await interaction.response.send_message(
                "❌ **Access Denied**\nThis command is restricted to the bot owner.",
                ephemeral=True
            )
            return
        
        await interaction.response.defer(ephemeral=True)
        
        report = await self.scheduler.run_once()
        
        if report is None:
            embed = discord.Embed(
                title="❌ Sync Failed",
                description="The sync cycle raised an unexpected error. Check the logs.",
                color=discord.Color.red()
            )
        else:
            embed = discord.Embed(
                title="❌ Sync Incomplete" if report.outcome.is_failure else "✅ Sync Complete",
                description=f"Outcome: **{report.outcome.value}**",
                color=discord.Color.red() if report.outcome.is_failure else discord.Color.green(),
                timestamp=datetime.now(timezone.utc)
            )
            if report.decision:
                embed.add_field(name="Decision", value=report.decision.value, inline=True)
            if report.message_id:
                embed.add_field(name="Message", value=str(report.message_id), inline=True)
            if report.detail:
                embed.add_field(name="Details", value=report.detail[:1000], inline=False)
        
        await interaction.followup.send(embed=embed, ephemeral=True)
        
        self.logger.info(
            f"Manual vote sync executed by {interaction.user.id} ({interaction.user.name}): "
            f"{report.outcome.value if report else 'error'}"
        )


async def setup(bot):
    await bot.add_cog(VoteTrackerCog(bot))
