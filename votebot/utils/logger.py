import logging
import sys
from datetime import datetime
from pathlib import Path

from votebot.config import Config


class SecretRedactingFilter(logging.Filter):
    """Mask credentials that leak into messages, e.g. the API key in a request URL."""
    
    def __init__(self, *secrets: str):
        super().__init__()
        self.secrets = [secret for secret in secrets if secret]
    
    def filter(self, record: logging.LogRecord) -> bool:
        if not self.secrets:
            return True
        message = record.getMessage()
        redacted = message
        for secret in self.secrets:
            redacted = redacted.replace(secret, '***')
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def setup_logger(name: str) -> logging.Logger:
    """Setup a logger with consistent formatting"""
    
    logger = logging.getLogger(name)
    
    if logger.handlers:
        return logger
    
    log_level = logging.DEBUG if Config.DEBUG else logging.INFO
    logger.setLevel(log_level)
    
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    redactor = SecretRedactingFilter(Config.SERVER_KEY, Config.DISCORD_TOKEN)
    
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(redactor)
    logger.addHandler(console_handler)
    
    # Daily file, always at DEBUG so a degraded cycle can be reconstructed
    log_dir = Path('logs')
    log_dir.mkdir(exist_ok=True)
    
    file_handler = logging.FileHandler(
        log_dir / f'vote_tracker_{datetime.now().strftime("%Y%m%d")}.log',
        encoding='utf-8'
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    file_handler.addFilter(redactor)
    logger.addHandler(file_handler)
    
    return logger
