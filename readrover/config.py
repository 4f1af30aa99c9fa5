"""Runtime configuration for ReadRover, read from the environment.

Values come from environment variables, with a project-root .env file loaded
first via python-dotenv.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass
class Settings:
    database_path: str = 'data/readrover.db'
    migrations_dir: str = 'migrations'
    feed_limit: int = 20
    secret_key: str = ''
    host: str = '0.0.0.0'
    port: int = 5001
    log_level: str = 'INFO'
    log_file: str = ''
    log_format: str = 'text'


def get_settings() -> Settings:
    """Build Settings from the current environment."""
    return Settings(
        database_path=os.getenv('READROVER_DB_PATH', 'data/readrover.db'),
        migrations_dir=os.getenv('READROVER_MIGRATIONS_DIR', 'migrations'),
        feed_limit=int(os.getenv('READROVER_FEED_LIMIT', '20')),
        secret_key=os.getenv('READROVER_SECRET_KEY', ''),
        host=os.getenv('READROVER_HOST', '0.0.0.0'),
        port=int(os.getenv('PORT', '5001')),
        log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        log_file=os.getenv('LOG_FILE', ''),
        log_format=os.getenv('LOG_FORMAT', 'text').lower(),
    )
