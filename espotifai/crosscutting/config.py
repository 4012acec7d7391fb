import os
import json
from typing import Dict, Any, Optional
from pathlib import Path

from dotenv import dotenv_values


DEFAULT_SEARCH_LIMIT = 20
DEFAULT_MARKET = 'US'
DEFAULT_TIMEOUT = 15.0


class ConfigError(Exception):
    """Configuration error."""
    pass


class SecretManager:
    """Manages application secrets and configuration."""

    def __init__(self, config_dir: Optional[str] = None):
        """Initialize secret manager."""
        self.config_dir = Path(config_dir) if config_dir else Path.home() / '.espotifai'

        self.tokens_file = self.config_dir / 'tokens.json'
        self.env_file = self.config_dir / '.env'
        self.playlists_file = self.config_dir / 'playlists.json'

    def ensure_config_dir(self) -> Path:
        """Create the configuration directory if needed."""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigError(f"Failed to create config directory {self.config_dir}: {e}")
        return self.config_dir

    def load_env_vars(self) -> Dict[str, str]:
        """Load variables from the .env file in the config directory."""
        if not self.env_file.exists():
            return {}

        try:
            values = dotenv_values(self.env_file)
        except (IOError, UnicodeDecodeError) as e:
            raise ConfigError(f"Failed to load .env file {self.env_file}: {e}")

        return {key: value for key, value in values.items() if value is not None}

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get a setting from the process environment, falling back to the .env file."""
        value = os.getenv(key)
        if value is not None and value.strip():
            return value
        value = self.load_env_vars().get(key)
        if value is not None and value.strip():
            return value
        return default

    def get_spotify_client_config(self) -> Dict[str, str]:
        """Get Spotify client credentials."""
        client_id = self.get('SPOTIFY_CLIENT_ID')
        client_secret = self.get('SPOTIFY_CLIENT_SECRET')

        if not client_id:
            raise ConfigError("SPOTIFY_CLIENT_ID not found in environment")
        if not client_secret:
            raise ConfigError("SPOTIFY_CLIENT_SECRET not found in environment")

        return {
            'client_id': client_id,
            'client_secret': client_secret,
        }

    def get_search_limit(self) -> int:
        """Get the number of tracks requested per search (1..50)."""
        raw = self.get('ESPOTIFAI_SEARCH_LIMIT', str(DEFAULT_SEARCH_LIMIT))
        try:
            limit = int(raw)
        except ValueError:
            raise ConfigError(f"ESPOTIFAI_SEARCH_LIMIT must be an integer, got {raw!r}")
        return max(1, min(50, limit))

    def get_market(self) -> str:
        """Get the market used to filter search results."""
        return self.get('ESPOTIFAI_MARKET', DEFAULT_MARKET)

    def get_request_timeout(self) -> float:
        """Get the HTTP timeout in seconds."""
        raw = self.get('ESPOTIFAI_TIMEOUT', str(DEFAULT_TIMEOUT))
        try:
            return float(raw)
        except ValueError:
            raise ConfigError(f"ESPOTIFAI_TIMEOUT must be a number, got {raw!r}")

    def get_playlists_path(self) -> Path:
        """Get the location of the local playlist store."""
        override = self.get('ESPOTIFAI_PLAYLISTS_FILE')
        return Path(override) if override else self.playlists_file

    def load_tokens(self) -> Dict[str, Any]:
        """Load tokens from tokens.json file."""
        if not self.tokens_file.exists():
            return {}

        try:
            with open(self.tokens_file, 'r') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            raise ConfigError(f"Failed to load tokens from {self.tokens_file}: {e}")

    def save_tokens(self, tokens: Dict[str, Any]) -> None:
        """Save tokens to tokens.json file."""
        existing_tokens = self.load_tokens()
        existing_tokens.update(tokens)

        self.ensure_config_dir()
        try:
            with open(self.tokens_file, 'w') as f:
                json.dump(existing_tokens, f, indent=2, ensure_ascii=False)
        except IOError as e:
            raise ConfigError(f"Failed to save tokens to {self.tokens_file}: {e}")

    def get_spotify_token(self) -> Optional[str]:
        """Get the saved Spotify access token."""
        spotify = self.load_tokens().get('spotify') or {}
        return spotify.get('access_token')

    def save_spotify_token(self, access_token: str) -> None:
        """Save the Spotify access token."""
        self.save_tokens({
            'spotify': {
                'access_token': access_token
            }
        })

    def get_config_summary(self) -> Dict[str, Any]:
        """Get configuration summary (without sensitive data)."""
        return {
            'config_dir': str(self.config_dir),
            'tokens_file': str(self.tokens_file),
            'env_file': str(self.env_file),
            'playlists_file': str(self.get_playlists_path()),
            'has_client_id': bool(self.get('SPOTIFY_CLIENT_ID')),
            'has_client_secret': bool(self.get('SPOTIFY_CLIENT_SECRET')),
            'has_spotify_token': bool(self.get_spotify_token()),
        }

    def clear_tokens(self) -> None:
        """Clear all stored tokens."""
        if self.tokens_file.exists():
            self.tokens_file.unlink()


# Global instance
secret_manager = SecretManager()


def get_secret_manager() -> SecretManager:
    """Get global secret manager instance."""
    return secret_manager


def setup_config(config_dir: Optional[str] = None) -> SecretManager:
    """Setup configuration with custom directory."""
    global secret_manager
    secret_manager = SecretManager(config_dir)
    return secret_manager
