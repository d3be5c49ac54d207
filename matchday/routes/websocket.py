"""
WebSocket API for real-time team sync

The server holds the source of truth. After every mutation the full team
snapshot is pushed to every client viewing that team.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Optional, Set

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status

from ..services.store import TeamStore
from .deps import get_store, get_today, get_window_days, require_team, today_watcher

logger = logging.getLogger(__name__)

router = APIRouter()


@dataclass
class ConnectionManager:
    """Manages WebSocket connections per team."""
    # team slug -> set of websocket connections
    team_connections: Dict[str, Set[WebSocket]] = field(default_factory=dict)
    # websocket -> member info
    connection_info: Dict[WebSocket, dict] = field(default_factory=dict)

    async def connect(self, websocket: WebSocket, slug: str, member_id: Optional[str], member_name: str = "Anonymous"):
        """Accept a new WebSocket connection for a team."""
        await websocket.accept()

        self.team_connections.setdefault(slug, set()).add(websocket)
        self.connection_info[websocket] = {
            "slug": slug,
            "member_id": member_id,
            "member_name": member_name,
            "connected_at": datetime.utcnow().isoformat()
        }
        logger.info(f"Client connected to team {slug} as {member_name}")

        # Notify others that someone joined
        await self.broadcast_to_team(slug, {
            "type": "user_joined",
            "member_id": member_id,
            "member_name": member_name,
            "timestamp": datetime.utcnow().isoformat()
        }, exclude=websocket)

        await websocket.send_json({
            "type": "users_online",
            "users": self.get_team_users(slug)
        })

    def disconnect(self, websocket: WebSocket) -> Optional[dict]:
        """Remove a WebSocket connection."""
        info = self.connection_info.pop(websocket, None)
        if not info:
            return None
        slug = info["slug"]
        connections = self.team_connections.get(slug)
        if connections is not None:
            connections.discard(websocket)
            if not connections:
                del self.team_connections[slug]
        logger.info(f"Client left team {slug}")
        return info

    def get_team_users(self, slug: str) -> list:
        """Get list of members currently connected to a team."""
        users = []
        for ws in self.team_connections.get(slug, ()):
            info = self.connection_info.get(ws)
            if info:
                users.append({
                    "member_id": info["member_id"],
                    "member_name": info["member_name"]
                })
        return users

    async def broadcast_to_team(self, slug: str, message: dict, exclude: Optional[WebSocket] = None):
        """Broadcast a message to all connections of a team."""
        dead_connections = set()
        for connection in list(self.team_connections.get(slug, ())):
            if connection == exclude:
                continue
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.debug(f"Dropping connection on team {slug}: {e}")
                dead_connections.add(connection)

        for dead in dead_connections:
            self.disconnect(dead)

    async def broadcast_all(self, message: dict):
        for slug in list(self.team_connections):
            await self.broadcast_to_team(slug, message)

    async def broadcast_today(self, today: date):
        """Tell every client the day rolled over so statuses are re-fetched."""
        await self.broadcast_all({"type": "today_changed", "today": today.isoformat()})


# Global connection manager
manager = ConnectionManager()


def snapshot_message(store: TeamStore, team: dict, today: date, window_days: int) -> dict:
    return {
        "type": "snapshot",
        "data": store.snapshot(team, today, window_days),
        "timestamp": datetime.utcnow().isoformat()
    }


async def publish_snapshot(store: TeamStore, team: dict, today: date, window_days: int):
    """Push the team's current state to all of its clients."""
    if team["slug"] not in manager.team_connections:
        return
    await manager.broadcast_to_team(
        team["slug"], snapshot_message(store, team, today, window_days)
    )


@router.websocket("/ws/teams/{slug}")
async def websocket_endpoint(
    websocket: WebSocket,
    slug: str,
    store: TeamStore = Depends(get_store),
    today: date = Depends(get_today),
    window_days: int = Depends(get_window_days),
):
    """WebSocket endpoint for real-time team updates."""
    code = websocket.query_params.get("code")
    member_id = websocket.query_params.get("member_id")

    team = store.get_team(slug)
    if not team or not store.check_access_code(team, code):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    member = store.get_member(team["id"], member_id) if member_id else None
    member_name = member["name"] if member else "Anonymous"

    await manager.connect(websocket, slug, member["id"] if member else None, member_name)
    await websocket.send_json(snapshot_message(store, team, today, window_days))
    watched_day = today_watcher.today

    try:
        while True:
            data = await websocket.receive_json()
            message_type = data.get("type")

            if message_type == "ping":
                await websocket.send_json({"type": "pong"})

            elif message_type == "refresh":
                # follow day rollovers that happened while connected
                if today_watcher.today != watched_day:
                    today = watched_day = today_watcher.today
                await websocket.send_json(
                    snapshot_message(store, team, today, window_days)
                )

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(f"WebSocket error on team {slug}: {e}")
    finally:
        info = manager.disconnect(websocket)
        if info:
            await manager.broadcast_to_team(slug, {
                "type": "user_left",
                "member_id": info["member_id"],
                "member_name": info["member_name"],
                "timestamp": datetime.utcnow().isoformat()
            })


@router.get("/ws/teams/{slug}/users")
async def get_online_users(slug: str, team: dict = Depends(require_team)):
    """Get list of members currently online on a team."""
    users = manager.get_team_users(slug)
    return {
        "slug": slug,
        "users": users,
        "count": len(users)
    }
