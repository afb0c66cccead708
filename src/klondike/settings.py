# settings.py - solitaire.conf persistence (plain key=value lines)
import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from klondike.engine import GameStats

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "solitaire.conf"


@dataclass
class Config:
    night_mode: bool = False
    audio_muted: bool = False
    games_played: int = 0
    games_won: int = 0
    window_bounds: Optional[Tuple[int, int, int, int]] = None

    def stats(self) -> GameStats:
        return GameStats(games_played=self.games_played, games_won=self.games_won)

    def update_stats(self, stats: GameStats):
        self.games_played = stats.games_played
        self.games_won = stats.games_won


def _config_dir() -> str:
    # Prefer %APPDATA% on Windows, else ~/.klondike_solitaire
    base = os.environ.get("APPDATA")
    if base:
        return os.path.join(base, "KlondikeSolitaire")
    return os.path.join(os.path.expanduser("~"), ".klondike_solitaire")


def config_path() -> str:
    override = os.environ.get("KLONDIKE_CONFIG")
    if override:
        return override
    return os.path.join(_config_dir(), CONFIG_FILENAME)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() == "true"


def _parse_bounds(value: str) -> Optional[Tuple[int, int, int, int]]:
    parts = value.split(",")
    if len(parts) != 4:
        return None
    x, y, w, h = (int(p.strip()) for p in parts)
    return x, y, w, h


def parse_config(text: str) -> Config:
    """Build a Config from file text. Bad lines are skipped, not fatal."""
    cfg = Config()
    for line in text.splitlines():
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key, value = key.strip(), value.strip()
        try:
            if key == "nightMode":
                cfg.night_mode = _parse_bool(value)
            elif key == "audioMuted":
                cfg.audio_muted = _parse_bool(value)
            elif key == "gamesPlayed":
                cfg.games_played = max(0, int(value))
            elif key == "gamesWon":
                cfg.games_won = max(0, int(value))
            elif key == "windowBounds":
                cfg.window_bounds = _parse_bounds(value)
        except ValueError:
            logger.debug("ignoring bad config line %r", line)
    return cfg


def format_config(cfg: Config) -> str:
    values: Dict[str, str] = {
        "nightMode": "true" if cfg.night_mode else "false",
        "audioMuted": "true" if cfg.audio_muted else "false",
        "gamesPlayed": str(cfg.games_played),
        "gamesWon": str(cfg.games_won),
    }
    if cfg.window_bounds is not None:
        values["windowBounds"] = ",".join(str(v) for v in cfg.window_bounds)
    return "".join(f"{k}={v}\n" for k, v in values.items())


def load_config(path: Optional[str] = None) -> Config:
    path = path or config_path()
    try:
        with open(path, "r", encoding="utf-8") as f:
            return parse_config(f.read())
    except Exception:
        # Missing or unreadable file: use defaults
        logger.debug("could not read %s", path, exc_info=True)
        return Config()


def save_config(cfg: Config, path: Optional[str] = None) -> bool:
    path = path or config_path()
    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(format_config(cfg))
        return True
    except Exception:
        logger.debug("could not write %s", path, exc_info=True)
        return False
