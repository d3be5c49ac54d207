"""Team routes: creation, snapshot, sharing and roster"""

import io
import logging
from datetime import date
from typing import List

import qrcode
import qrcode.image.svg
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from ..models.team import Member, MemberCreate, ShareInfo, TeamCreate
from ..services.store import TeamStore, build_share_url, public_team, split_member_names
from .deps import get_store, get_today, get_window_days, require_team
from .websocket import publish_snapshot

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("")
async def create_team(data: TeamCreate, store: TeamStore = Depends(get_store)):
    """Create a team; the creator and the listed names become members"""
    team = store.create_team(
        data.name,
        data.creator_name,
        split_member_names(data.member_names),
        data.players_needed,
    )
    members = store.list_members(team["id"])
    return {
        "team": public_team(team),
        "access_code": team["access_code"],
        "share_url": build_share_url(team),
        "members": members,
        "creator": members[0],
    }


@router.get("/{slug}")
async def get_team(
    team: dict = Depends(require_team),
    store: TeamStore = Depends(get_store),
    today: date = Depends(get_today),
    window_days: int = Depends(get_window_days),
):
    """Team snapshot with members and matches"""
    return store.snapshot(team, today, window_days)


@router.get("/{slug}/share", response_model=ShareInfo)
async def get_share_info(team: dict = Depends(require_team)):
    """Link and access code to hand out to teammates"""
    return ShareInfo(url=build_share_url(team), access_code=team["access_code"], slug=team["slug"])


@router.get("/{slug}/share/qr.svg")
async def get_share_qr(team: dict = Depends(require_team)):
    """QR code of the share link"""
    qr = qrcode.QRCode(box_size=10, border=4, image_factory=qrcode.image.svg.SvgPathImage)
    qr.add_data(build_share_url(team))
    qr.make(fit=True)

    buffer = io.BytesIO()
    qr.make_image().save(buffer)
    return Response(content=buffer.getvalue(), media_type="image/svg+xml")


@router.get("/{slug}/members", response_model=List[Member])
async def list_members(team: dict = Depends(require_team), store: TeamStore = Depends(get_store)):
    """List the roster in join order"""
    return store.list_members(team["id"])


@router.post("/{slug}/members", response_model=Member)
async def join_team(
    data: MemberCreate,
    team: dict = Depends(require_team),
    store: TeamStore = Depends(get_store),
    today: date = Depends(get_today),
    window_days: int = Depends(get_window_days),
):
    """Self-service join"""
    if store.find_member_by_name(team["id"], data.name):
        raise HTTPException(status_code=400, detail="A member with this name already exists")

    member = store.add_member(team["id"], data.name)
    await publish_snapshot(store, team, today, window_days)
    return member
