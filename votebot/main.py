import asyncio
import logging
import traceback
from typing import Optional

import discord
from discord.ext import commands
from discord import app_commands

from votebot.config import Config
from votebot.database.database import Database
from votebot.services.health import HealthMonitor, HealthServer
from votebot.services.message_transport import DiscordMessageTransport
from votebot.services.sync_state_store import SyncStateStore
from votebot.services.vote_provider import VoteProviderClient
from votebot.services.vote_sync import SyncContext
from votebot.utils.logger import setup_logger

class VoteTrackerBot(commands.Bot):
    def __init__(self):
        intents = discord.Intents.default()
        intents.guilds = True
        intents.guild_messages = True
        
        super().__init__(
            command_prefix=Config.COMMAND_PREFIX,
            intents=intents,
            help_command=None
        )
        
        self.tree.on_error = self.on_app_command_error
        
        self.db: Optional[Database] = None
        self.provider: Optional[VoteProviderClient] = None
        self.sync_context: Optional[SyncContext] = None
        self.health_monitor = HealthMonitor()
        self.health_server: Optional[HealthServer] = None
        self.logger = setup_logger(__name__)
        
    async def setup_hook(self):
        """Called when the bot is starting up"""
        self.logger.info("Setting up Vote Tracker Bot...")
        
        self.db = Database(Config.DATABASE_URL, echo=Config.DEBUG)
        await self.db.initialize()
        
        settings = Config.to_sync_settings()
        store = SyncStateStore(self.db)
        self.provider = VoteProviderClient.from_settings(settings)
        self.sync_context = SyncContext(
            settings=settings,
            provider=self.provider,
            transport=DiscordMessageTransport(self, settings.channel_id),
            store=store,
        )
        
        self.health_server = HealthServer(
            self.health_monitor,
            is_bot_ready=self.is_ready,
            ping_database=store.ping,
            host=Config.HEALTH_HOST,
            port=Config.PORT,
        )
        await self.health_server.start()
        
        await self.load_extension('votebot.cogs.vote_tracker')
        self.logger.info("Loaded cog: votebot.cogs.vote_tracker")
        
        await self._sync_commands()
        
        self.logger.info("Vote Tracker Bot setup complete!")
    
    async def _sync_commands(self):
        """Sync slash commands with Discord"""
        try:
            guild_ids = Config.get_guild_ids()
            
            if guild_ids:
                for guild_id in guild_ids:
                    try:
                        guild = discord.Object(id=guild_id)
                        self.tree.copy_global_to(guild=guild)
                        synced = await self.tree.sync(guild=guild)
                        self.logger.info(f"Successfully synced {len(synced)} command(s) to guild {guild_id}")
                    except discord.errors.Forbidden:
                        self.logger.error(f"Permission error syncing to guild {guild_id}. Ensure the bot has the 'application.commands' scope and is in the guild.", exc_info=True)
                    except discord.errors.HTTPException as e:
                        self.logger.error(f"HTTP error syncing to guild {guild_id}. Status: {e.status}, Response: {e.text}", exc_info=True)
            else:
                self.logger.info("Attempting to sync commands globally... (Note: This can take up to an hour to propagate)")
                synced = await self.tree.sync()
                self.logger.info(f"Successfully synced {len(synced)} command(s) globally")
        except Exception as e:
            self.logger.error(f"Failed to sync commands: {e}", exc_info=True)
            # Don't raise - the sync loop does not depend on slash commands
                
    async def on_ready(self):
        """Called when the bot is ready"""
        self.logger.info(f'Bot is ready! Logged in as {self.user}')
        
        await self.change_presence(
            activity=discord.Activity(type=discord.ActivityType.watching, name="server votes")
        )
    
    async def on_app_command_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError):
        """Global error handler for slash commands"""
        command_name = interaction.command.name if interaction.command else 'Unknown'
        if isinstance(error, app_commands.CheckFailure):
            self.logger.info(f"Permission denied for command '{command_name}' by user {interaction.user}")
            error_message = "❌ You don't have permission to use this command."
        else:
            self.logger.error(f"Error in app command '{command_name}': {error}", exc_info=True)
            error_message = "❌ An unexpected error occurred while processing your command."
        
        try:
            error_embed = discord.Embed(title=error_message, color=discord.Color.red())
            if interaction.response.is_done():
                await interaction.followup.send(embed=error_embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=error_embed, ephemeral=True)
        except Exception as e:
            self.logger.error(f"Failed to send error response: {e}")
        
    async def close(self):
        """Cleanup when bot is shutting down"""
        self.logger.info("Shutting down Vote Tracker Bot...")

        # Unloads the cog first, which stops the sync loop
        await super().close()

        if self.health_server:
            await self.health_server.stop()

        if self.provider:
            await self.provider.close()

        if self.db:
            await self.db.close()

async def main():
    """Main entry point"""
    Config.validate()
    
    bot = VoteTrackerBot()
    
    try:
        await bot.start(Config.DISCORD_TOKEN)
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        traceback.print_exc()
    finally:
        await bot.close()

def run():
    asyncio.run(main())

if __name__ == "__main__":
    run()
