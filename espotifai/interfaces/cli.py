import argparse
import json
import sys
import threading
from typing import Any, List, Optional

from espotifai.application.api import Api
from espotifai.crosscutting.config import ConfigError, SecretManager, setup_config
from espotifai.crosscutting.logging import get_logger, setup_logging
from espotifai.domain.entities import AddResult, MusicInfo, Playlist
from espotifai.domain.errors import Failure

logger = get_logger(__name__)


def format_music(music: MusicInfo) -> str:
    """Render a track on one line."""
    line = f"{music.title} - {music.artist}" if music.artist else music.title
    if music.album:
        line += f" [{music.album}]"
    if music.uri:
        line += f" ({music.uri})"
    return line


def format_playlist(playlist: Playlist) -> str:
    """Render a playlist on one line."""
    return f"{playlist.name} (owner: {playlist.owner}, tracks: {playlist.track_count})"


class ConsoleListener:
    """Listener printing the outcome of a facade call.

    Implements every listener protocol. ``wait`` blocks until the outcome arrives,
    whichever thread delivers it.
    """

    def __init__(self, out=None, err=None):
        self.out = out or sys.stdout
        self.err = err or sys.stderr
        self.result: Any = None
        self.failure: Optional[Failure] = None
        self._done = threading.Event()

    def on_success(self, result: Any) -> None:
        self.result = result
        self._print_result(result)
        self._done.set()

    def on_failure(self, failure: Failure) -> None:
        self.failure = failure
        print(f"Error ({failure.kind.value}): {failure.reason}", file=self.err)
        self._done.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._done.wait(timeout)

    @property
    def exit_code(self) -> int:
        return 0 if self._done.is_set() and self.failure is None else 1

    def _print_result(self, result: Any) -> None:
        if isinstance(result, list):
            if not result:
                print("No results.", file=self.out)
            for index, item in enumerate(result, 1):
                text = format_music(item) if isinstance(item, MusicInfo) else format_playlist(item)
                print(f"{index:>3}. {text}", file=self.out)
        elif isinstance(result, Playlist):
            print(f"Created playlist {format_playlist(result)}", file=self.out)
        elif isinstance(result, AddResult):
            print(f"Added {format_music(result.music)} to '{result.playlist}' "
                  f"(tracks: {result.track_count})", file=self.out)
        else:
            print(result, file=self.out)


class CLI:
    """Command Line Interface for espotifai."""

    def __init__(self, wait_timeout: float = 60.0):
        """Initialize CLI."""
        self.parser = self._create_parser()
        self.wait_timeout = wait_timeout

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create argument parser."""
        parser = argparse.ArgumentParser(
            prog='espotifai',
            description='Search Spotify and manage local playlists'
        )
        parser.add_argument(
            '--log-level',
            choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
            default='WARNING',
            help='Set logging level'
        )
        parser.add_argument(
            '--config-dir',
            default=None,
            help='Configuration directory (default: ~/.espotifai)'
        )

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        auth_parser = subparsers.add_parser('auth', help='Request an access token')
        auth_parser.add_argument('--client-id', help='Spotify client ID (default: SPOTIFY_CLIENT_ID)')
        auth_parser.add_argument('--client-secret', help='Spotify client secret (default: SPOTIFY_CLIENT_SECRET)')
        auth_parser.add_argument(
            '--no-save',
            action='store_true',
            help='Do not store the token in tokens.json'
        )

        search_parser = subparsers.add_parser('search', help='Search musics by name')
        search_parser.add_argument('name', help='Music name')
        search_parser.add_argument('--token', help='Access token (default: saved token)')

        create_parser = subparsers.add_parser('create-playlist', help='Create a local playlist')
        create_parser.add_argument('name', help='Playlist name')
        create_parser.add_argument('--owner', required=True, help='Playlist owner')

        add_parser = subparsers.add_parser('add', help='Add a music to a playlist')
        add_parser.add_argument('playlist', help='Playlist name')
        add_parser.add_argument('--title', required=True, help='Music title')
        add_parser.add_argument('--artist', default='', help='Music artist')
        add_parser.add_argument('--album', default='', help='Music album')
        add_parser.add_argument('--id', default='', help='Spotify track ID')
        add_parser.add_argument('--uri', default='', help='Spotify track URI')

        list_parser = subparsers.add_parser('list', help='List the musics of a playlist')
        list_parser.add_argument('playlist', help='Playlist name')

        subparsers.add_parser('playlists', help='List all playlists')

        config_parser = subparsers.add_parser('config', help='Show configuration summary')
        config_parser.add_argument(
            '--clear-tokens',
            action='store_true',
            help='Delete the stored access token first'
        )

        return parser

    def _create_api(self) -> Api:
        """Create the facade with the default collaborators."""
        return Api()

    def _wait(self, listener: ConsoleListener) -> int:
        if not listener.wait(self.wait_timeout):
            logger.error(f"No outcome received within {self.wait_timeout}s")
            return 1
        return listener.exit_code

    def _request_access(self, api: Api, config: SecretManager, args: argparse.Namespace) -> int:
        client_id = args.client_id
        client_secret = args.client_secret
        if not client_id or not client_secret:
            client = config.get_spotify_client_config()
            client_id = client_id or client['client_id']
            client_secret = client_secret or client['client_secret']

        listener = ConsoleListener()
        api.request_access(listener, client_id, client_secret)
        code = self._wait(listener)

        if code == 0 and not args.no_save:
            config.save_spotify_token(listener.result)
            logger.info(f"Token saved to {config.tokens_file}")
        return code

    def _search_music(self, api: Api, config: SecretManager, args: argparse.Namespace) -> int:
        token = args.token or config.get_spotify_token() or ''
        listener = ConsoleListener()
        api.search_music(listener, token, args.name)
        return self._wait(listener)

    def _create_playlist(self, api: Api, args: argparse.Namespace) -> int:
        listener = ConsoleListener()
        api.create_playlist(listener, args.name, args.owner)
        return self._wait(listener)

    def _add_music(self, api: Api, args: argparse.Namespace) -> int:
        music = MusicInfo(
            title=args.title,
            artist=args.artist,
            id=args.id,
            album=args.album,
            uri=args.uri,
        )
        listener = ConsoleListener()
        api.add_music_to_playlist(listener, music, args.playlist)
        return self._wait(listener)

    def _list_playlist_musics(self, api: Api, args: argparse.Namespace) -> int:
        listener = ConsoleListener()
        api.list_playlist_musics(listener, args.playlist)
        return self._wait(listener)

    def _get_playlists(self, api: Api) -> int:
        listener = ConsoleListener()
        api.get_playlists(listener)
        return self._wait(listener)

    def _show_config(self, config: SecretManager, args: argparse.Namespace) -> int:
        if args.clear_tokens:
            config.clear_tokens()
            logger.info(f"Cleared tokens in {config.tokens_file}")
        print(json.dumps(config.get_config_summary(), indent=2))
        return 0

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Run the CLI and return the process exit code."""
        args = self.parser.parse_args(argv)

        if not args.command:
            self.parser.print_help()
            return 1

        setup_logging(args.log_level)

        try:
            config = setup_config(args.config_dir)
            if args.command == 'config':
                return self._show_config(config, args)

            api = self._create_api()

            if args.command == 'auth':
                return self._request_access(api, config, args)
            elif args.command == 'search':
                return self._search_music(api, config, args)
            elif args.command == 'create-playlist':
                return self._create_playlist(api, args)
            elif args.command == 'add':
                return self._add_music(api, args)
            elif args.command == 'list':
                return self._list_playlist_musics(api, args)
            elif args.command == 'playlists':
                return self._get_playlists(api)

            self.parser.print_help()
            return 1

        except ConfigError as e:
            logger.error(f"Configuration error: {e}")
            print(f"Configuration error: {e}", file=sys.stderr)
            return 1
        except KeyboardInterrupt:
            logger.warning("Operation cancelled by user")
            return 130


def main():
    """Main entry point."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == '__main__':
    main()
