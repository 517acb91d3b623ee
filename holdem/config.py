"""Application configuration."""
import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value == "":
        return None
    return int(value)


@dataclass
class Config:
    """Application configuration loaded from environment variables."""
    
    # Table stakes
    small_blind: int = int(os.getenv("SMALL_BLIND", "10"))
    big_blind: int = int(os.getenv("BIG_BLIND", "20"))
    starting_chips: int = int(os.getenv("STARTING_CHIPS", "20000"))
    
    # Seating
    min_players: int = int(os.getenv("MIN_PLAYERS", "2"))
    max_players: int = int(os.getenv("MAX_PLAYERS", "10"))
    
    # Shuffling (unset means a fresh random source per table)
    deck_seed: Optional[int] = _optional_int("DECK_SEED")
    
    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


config = Config()
