import time
import hashlib
import logging
from typing import Any, Dict, List, Optional, Tuple

import requests
import spotipy
from urllib3.exceptions import ReadTimeoutError

from espotifai.domain.entities import MusicInfo
from espotifai.domain.errors import RateLimited, RemoteFailure, Unauthorized

logger = logging.getLogger(__name__)

TOKEN_URL = "https://accounts.spotify.com/api/token"


class SpotifyAuthenticator:
    """Client-credentials authenticator against the Spotify accounts service."""

    def __init__(self, timeout: float = 15.0, token_url: str = TOKEN_URL, expiry_margin: int = 60):
        """Initialize Spotify authenticator.

        Args:
            timeout: HTTP timeout in seconds
            token_url: Token endpoint
            expiry_margin: Seconds before expiry at which a cached token is renewed
        """
        self.timeout = timeout
        self.token_url = token_url
        self.expiry_margin = expiry_margin
        self._tokens: Dict[Tuple[str, str], Tuple[str, float]] = {}

    def authenticate(self, client_id: str, client_secret: str) -> str:
        """Exchange client credentials for an access token.

        Raises:
            Unauthorized: credentials rejected
            RemoteFailure: network error or unexpected response
        """
        cache_key = self._cache_key(client_id, client_secret)
        cached = self._tokens.get(cache_key)
        if cached and cached[1] > time.time():
            logger.debug("Using cached Spotify access token")
            return cached[0]

        try:
            response = requests.post(
                self.token_url,
                data={'grant_type': 'client_credentials'},
                auth=(client_id, client_secret),
                headers={'Content-Type': 'application/x-www-form-urlencoded'},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Spotify token request failed: {e}")
            raise RemoteFailure(f"Token request failed: {e}")

        if response.status_code in (400, 401):
            raise Unauthorized(f"Spotify rejected client credentials: {self._describe_error(response)}")
        if response.status_code != 200:
            raise RemoteFailure(
                f"Token request failed with status {response.status_code}: {self._describe_error(response)}"
            )

        try:
            token_data = response.json()
        except ValueError:
            raise RemoteFailure("Token response is not valid JSON")

        if not isinstance(token_data, dict):
            raise RemoteFailure("Token response is not a JSON object")

        access_token = token_data.get('access_token')
        if not access_token:
            raise RemoteFailure("Token response has no access_token")

        expires_in = int(token_data.get('expires_in', 0))
        if expires_in > self.expiry_margin:
            self._tokens[cache_key] = (access_token, time.time() + expires_in - self.expiry_margin)

        logger.info("Spotify access token obtained")
        return access_token

    @staticmethod
    def _cache_key(client_id: str, client_secret: str) -> Tuple[str, str]:
        """Tokens are cached per credential pair; the secret is only kept as a digest."""
        return client_id, hashlib.sha256(client_secret.encode("utf-8")).hexdigest()

    @staticmethod
    def _describe_error(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason or ''
        if not isinstance(body, dict):
            return str(body)
        return body.get('error_description') or body.get('error') or str(body)


class SpotifySearcher:
    """Track searcher backed by spotipy."""

    def __init__(self, limit: int = 20, market: Optional[str] = 'US', timeout: float = 15.0):
        """Initialize Spotify searcher.

        Args:
            limit: Number of tracks requested per search (1..50)
            market: ISO country code used to filter results, or None
            timeout: HTTP timeout in seconds
        """
        self.limit = max(1, min(50, limit))
        self.market = market
        self.timeout = timeout

    def _create_client(self, token: str) -> spotipy.Spotify:
        return spotipy.Spotify(auth=token, requests_timeout=self.timeout)

    def search(self, token: str, query: str) -> List[MusicInfo]:
        """Search tracks by name.

        Raises:
            Unauthorized: token rejected
            RateLimited: too many requests
            RemoteFailure: any other platform or network error
        """
        client = self._create_client(token)

        try:
            response = client.search(q=query, type='track', limit=self.limit, market=self.market)
        except spotipy.SpotifyException as e:
            raise self._translate_error(e)
        except (requests.RequestException, ReadTimeoutError) as e:
            logger.error(f"Spotify search failed: {e}")
            raise RemoteFailure(f"Search request failed: {e}")

        items = ((response or {}).get('tracks') or {}).get('items') or []

        musics = []
        for item in items:
            music = self._spotify_track_to_domain(item)
            if music:
                musics.append(music)

        logger.debug(f"Spotify search returned {len(musics)} tracks")
        return musics

    @staticmethod
    def _translate_error(error: spotipy.SpotifyException) -> Exception:
        status = getattr(error, 'http_status', None)
        message = getattr(error, 'msg', None) or str(error)

        if status == 401:
            return Unauthorized(f"Spotify rejected the access token: {message}")
        if status == 429:
            headers = getattr(error, 'headers', None) or {}
            try:
                retry_after_ms = int(headers.get('Retry-After', 1)) * 1000
            except (TypeError, ValueError):
                retry_after_ms = 1000
            return RateLimited(retry_after_ms, f"Spotify rate limit reached: {message}")

        logger.error(f"Spotify search failed with status {status}: {message}")
        return RemoteFailure(f"Spotify search failed ({status}): {message}")

    @staticmethod
    def _spotify_track_to_domain(spotify_track: Dict[str, Any]) -> Optional[MusicInfo]:
        """Convert Spotify track to domain MusicInfo.

        Returns:
            MusicInfo or None if the item is malformed
        """
        try:
            title = spotify_track.get('name')
            if not title:
                return None

            artists = spotify_track.get('artists') or []
            artist_names = [artist.get('name', '') for artist in artists if artist.get('name')]

            album = spotify_track.get('album') or {}
            track_id = spotify_track.get('id') or ''

            return MusicInfo(
                title=title,
                artist=', '.join(artist_names),
                id=track_id,
                album=album.get('name', ''),
                uri=spotify_track.get('uri') or (f"spotify:track:{track_id}" if track_id else ''),
                duration_ms=int(spotify_track.get('duration_ms') or 0),
            )

        except (AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Failed to convert Spotify track to domain: {e}")
            return None
