import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from votebot.constants import ProviderConstants, SyncConstants

load_dotenv()


@dataclass(frozen=True)
class SyncSettings:
    """Settings threaded through the synchronization engine."""
    tracked_entity_id: str
    channel_id: int
    server_key: str
    period: Optional[str] = None
    response_format: str = ProviderConstants.DEFAULT_FORMAT
    api_url: str = ProviderConstants.DEFAULT_API_URL
    fetch_timeout: float = ProviderConstants.DEFAULT_TIMEOUT
    interval_seconds: float = SyncConstants.DEFAULT_INTERVAL_MINUTES * 60


class Config:
    """Bot configuration settings"""
    
    # Discord settings
    DISCORD_TOKEN = os.getenv('DISCORD_TOKEN')
    DISCORD_GUILD_ID = int(os.getenv('DISCORD_GUILD_ID', 0))
    DISCORD_GUILD_IDS = os.getenv('DISCORD_GUILD_IDS', '')  # Comma-separated for multi-guild support
    OWNER_DISCORD_ID = int(os.getenv('OWNER_DISCORD_ID', 0))
    CHANNEL_ID = int(os.getenv('CHANNEL_ID', 0))
    
    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///vote_tracker.db')
    
    # Bot settings
    COMMAND_PREFIX = os.getenv('COMMAND_PREFIX', '!')
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    
    # Vote provider settings
    SERVER_KEY = os.getenv('SERVER_KEY', '')
    TRACKED_ENTITY_ID = os.getenv('TRACKED_ENTITY_ID', '') or SERVER_KEY
    PERIOD = os.getenv('PERIOD') or None  # None means "current month" on every cycle
    FORMAT = os.getenv('FORMAT', ProviderConstants.DEFAULT_FORMAT)
    VOTE_API_URL = os.getenv('VOTE_API_URL', ProviderConstants.DEFAULT_API_URL)
    FETCH_TIMEOUT = float(os.getenv('FETCH_TIMEOUT', ProviderConstants.DEFAULT_TIMEOUT))
    
    # Sync settings
    SYNC_INTERVAL_MINUTES = float(os.getenv('SYNC_INTERVAL_MINUTES', SyncConstants.DEFAULT_INTERVAL_MINUTES))
    
    # Liveness server settings
    HEALTH_HOST = os.getenv('HEALTH_HOST', '0.0.0.0')
    PORT = int(os.getenv('PORT', 3000))
    
    @classmethod
    def get_guild_ids(cls):
        """Get list of guild IDs for command syncing"""
        if cls.DISCORD_GUILD_IDS:
            try:
                return [int(guild_id.strip()) for guild_id in cls.DISCORD_GUILD_IDS.split(',') if guild_id.strip()]
            except ValueError:
                raise ValueError("DISCORD_GUILD_IDS must be comma-separated integers")
        elif cls.DISCORD_GUILD_ID:
            return [cls.DISCORD_GUILD_ID]
        else:
            # Global sync
            return []
    
    @classmethod
    def validate(cls):
        """Validate that required configuration is present"""
        if not cls.DISCORD_TOKEN:
            raise ValueError("DISCORD_TOKEN is required")
        if not cls.CHANNEL_ID:
            raise ValueError("CHANNEL_ID is required")
        if not cls.SERVER_KEY:
            raise ValueError("SERVER_KEY is required")
        if cls.SYNC_INTERVAL_MINUTES <= 0:
            raise ValueError("SYNC_INTERVAL_MINUTES must be positive")
    
    @classmethod
    def to_sync_settings(cls) -> SyncSettings:
        """Snapshot the environment into the immutable bundle the sync engine uses."""
        return SyncSettings(
            tracked_entity_id=cls.TRACKED_ENTITY_ID,
            channel_id=cls.CHANNEL_ID,
            server_key=cls.SERVER_KEY,
            period=cls.PERIOD,
            response_format=cls.FORMAT,
            api_url=cls.VOTE_API_URL,
            fetch_timeout=cls.FETCH_TIMEOUT,
            interval_seconds=cls.SYNC_INTERVAL_MINUTES * 60,
        )
