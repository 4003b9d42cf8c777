"""
Game state integration receiver

The game POSTs its full state as JSON to a local HTTP endpoint every time
something changes. Each payload becomes a GameState that is fed to the
PlaybackSelector; every resulting decision is handed to the playback sink.

Responses:
    200 - payload accepted (whether or not anything played)
    400 - body is not a JSON object
    401 - auth token does not match the configured one
"""

import asyncio
from typing import Callable, Optional

from aiohttp import web

from .state import GameState
from ..assets.models import Asset
from ..events.selector import PlaybackSelector
from ..exceptions import GameStateError
from ..utils.logger import get_logger


class GameStateServer:
    """
    aiohttp application wrapping a PlaybackSelector

    Args:
        selector: Decides what to play for each transition
        on_play: Playback sink called with every chosen asset
        auth_token: Expected value of the payload's auth.token; empty disables the check
    """

    def __init__(
        self,
        selector: PlaybackSelector,
        on_play: Callable[[Asset], object],
        auth_token: str = ""
    ):
        self.selector = selector
        self.on_play = on_play
        self.auth_token = auth_token
        self.logger = get_logger(__name__)
        self._match_id: Optional[str] = None

    def create_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post('/', self.handle_state)
        return app

    async def handle_state(self, request: web.Request) -> web.Response:
        try:
            payload = await request.json()
            state = GameState.from_dict(payload)
        except (ValueError, GameStateError) as e:
            self.logger.debug(f"Rejected game state payload: {e}")
            return web.Response(status=400, text="invalid game state")

        if self.auth_token and state.auth_token != self.auth_token:
            self.logger.warning("Rejected game state with wrong auth token")
            return web.Response(status=401, text="invalid token")

        # A new match must not be compared against the last one
        if state.match_id and state.match_id != self._match_id:
            if self._match_id is not None:
                self.logger.info(f"New match detected: {state.match_id}")
                self.selector.reset()
            self._match_id = state.match_id

        # Catalog lookups may hit the disk
        decisions = await asyncio.get_running_loop().run_in_executor(None, self.selector.on_state, state)
        for decision in decisions:
            self.on_play(decision.asset)

        return web.Response(text="ok")

    def run(self, host: str = "127.0.0.1", port: int = 12345) -> None:
        """Serve until interrupted"""
        self.logger.console_info(f"Listening for game state on http://{host}:{port}/")
        web.run_app(self.create_app(), host=host, port=port, print=None)
