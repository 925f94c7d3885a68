from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect

from src.core.events import Notifier, map_events
from src.core.exceptions import DatabaseError, NotInGame
from src.core.game.board import load_board
from src.core.game.config import GameConfig
from src.core.game.store import GameStore
from src.data import SqlGameStore, close_db, init_db
from src.services import ActionResult, GameService
from src.services import messages
from src.settings import get_game_settings

from .notifier import DROPPED, QueueNotifier
from .schemas import (
    ActionResponse,
    MessageResponse,
    SellableCellDTO,
    SellableResponse,
    SellRequest,
    StartRequest,
)

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[GameConfig] = None,
    store: Optional[GameStore] = None,
    notifier: Optional[Notifier] = None,
) -> FastAPI:
    """
    Build the HTTP/WebSocket adapter around a GameService.

    Without arguments the game rules come from ``GAME_*`` environment
    variables and state is kept in PostgreSQL. Tests pass an explicit
    config and an in-memory store.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application lifecycle - startup and shutdown."""
        game_config = config
        game_store = store
        owns_db = False

        if game_config is None:
            settings = get_game_settings()
            logging.basicConfig(
                level=settings.log_level.upper(),
                format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            )
            game_config = GameConfig.from_settings(settings)
        else:
            settings = None

        if game_store is None:
            logger.info("Initializing database connection")
            game_store = SqlGameStore(await init_db())
            owns_db = True
            if settings is not None and settings.board_file and not await game_store.list_cells():
                await game_store.seed_board(load_board(settings.board_file))

        service = GameService(game_config, game_store, app.state.notifier)
        await service.initialize()
        app.state.service = service
        logger.info(f"Land-grid server ready ({game_config.board_size}x{game_config.board_size} board)")

        yield

        logger.info("Shutting down server")
        if owns_db:
            await close_db()

    app = FastAPI(title="Landgrid Server", version="0.1.0", lifespan=lifespan)
    app.state.notifier = notifier or QueueNotifier()

    # ---- Dependencies ----
    def get_service(request: Request) -> GameService:
        return request.app.state.service

    def to_response(player_id: str, result: ActionResult) -> ActionResponse:
        return ActionResponse(
            player_id=player_id,
            ok=result.ok,
            message=result.message,
            error=type(result.error).__name__ if result.error else None,
            events=map_events(result.events),
        )

    @app.post("/players/{player_id}/start", response_model=MessageResponse)
    async def start(player_id: str, req: StartRequest, service: GameService = Depends(get_service)):
        message = await service.start_game(player_id, req.name)
        return MessageResponse(player_id=player_id, message=message)

    @app.post("/players/{player_id}/turn", response_model=ActionResponse)
    async def take_turn(player_id: str, service: GameService = Depends(get_service)):
        return to_response(player_id, await service.take_turn(player_id))

    @app.post("/players/{player_id}/buy", response_model=ActionResponse)
    async def buy(player_id: str, service: GameService = Depends(get_service)):
        return to_response(player_id, await service.buy_current_cell(player_id))

    @app.get("/players/{player_id}/sellable", response_model=SellableResponse)
    async def sellable(player_id: str, service: GameService = Depends(get_service)):
        try:
            cells = await service.list_sellable_cells(player_id)
        except NotInGame:
            raise HTTPException(status_code=404, detail=messages.not_in_game())
        except DatabaseError:
            raise HTTPException(status_code=503, detail=messages.RETRY_MESSAGE)
        return SellableResponse(
            player_id=player_id,
            cells=[
                SellableCellDTO(
                    cell_key=c.cell_key.token,
                    x=c.cell_key.x,
                    y=c.cell_key.y,
                    estimated_price=c.estimated_price,
                )
                for c in cells
            ],
        )

    @app.post("/players/{player_id}/sell", response_model=ActionResponse)
    async def sell(player_id: str, req: SellRequest, service: GameService = Depends(get_service)):
        return to_response(player_id, await service.sell_cell(player_id, req.cell_key))

    @app.get("/snapshot")
    async def snapshot(service: GameService = Depends(get_service)):
        try:
            return await service.snapshot()
        except DatabaseError:
            logger.exception("Failed to build game snapshot")
            raise HTTPException(status_code=503, detail=messages.RETRY_MESSAGE)

    @app.websocket("/ws/players/{player_id}")
    async def ws_player(websocket: WebSocket, player_id: str):
        hub = websocket.app.state.notifier
        if not isinstance(hub, QueueNotifier):
            await websocket.close(code=4400)
            return

        # Subscribe before the handshake completes so no broadcast is missed
        queue = hub.subscribe(player_id)
        await websocket.accept()

        async def sender():
            while True:
                msg = await queue.get()
                if msg is DROPPED:
                    await websocket.close(code=1013)
                    return
                await websocket.send_json(msg)

        async def receiver():
            # Inbound frames are ignored; actions go through the HTTP endpoints
            try:
                while True:
                    await websocket.receive_text()
            except WebSocketDisconnect:
                pass

        tasks = {asyncio.create_task(sender()), asyncio.create_task(receiver())}
        try:
            done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            for task in done:
                if not task.cancelled() and task.exception() is not None:
                    logger.warning(f"WebSocket of player {player_id} failed: {task.exception()!r}")
        finally:
            hub.unsubscribe(player_id, queue)
            for task in tasks:
                task.cancel()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.app:app", host="0.0.0.0", port=8000)
