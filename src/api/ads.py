from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.bumps.activation import activate_bump, get_schedule_for_ad
from src.db.database import get_db
from src.errors import AdNotFoundError, ScheduleNotFoundError
from src.models.bump_schedule import BumpSchedule
from src.models.vehicle_ad import PROMOTION_BOOSTED, STATUS_ACTIVE, STATUS_INACTIVE, VehicleAd

router = APIRouter(prefix="/api", tags=["ads"])


class CreateAdRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    seller_name: str = Field(alias="name")
    email: str
    mobile: str
    district: str
    city: Optional[str] = None
    vehicle_type: str = Field(alias="vehicleType")
    condition: str
    make: str
    model: str
    year: int
    price: Optional[int] = None
    ongoing_lease: bool = Field(False, alias="ongoingLease")
    transmission: str
    fuel_type: str = Field(alias="fuelType")
    engine_capacity: Optional[int] = Field(None, alias="engineCapacity")
    mileage: int
    description: Optional[str] = None


class ActivateBumpRequest(BaseModel):
    # Left untyped so malformed values reach our own validation (400, not 422)
    remaining_bumps: Any = Field(None, alias="remainingBumps")
    interval_hours: Any = Field(None, alias="intervalHours")
    start_at: Any = Field(None, alias="startAt")


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def serialize_schedule(schedule: Optional[BumpSchedule]) -> Optional[dict]:
    if schedule is None:
        return None
    return {
        "id": schedule.id,
        "adId": schedule.ad_id,
        "remainingBumps": schedule.remaining_bumps,
        "intervalHours": schedule.interval_hours,
        "nextBumpTime": _iso(schedule.next_bump_time),
        "lastBumpTime": _iso(schedule.last_bump_time),
        "isActive": schedule.is_active,
        "createdAt": _iso(schedule.created_at),
        "updatedAt": _iso(schedule.updated_at),
    }


def serialize_ad(ad: VehicleAd, schedule: Optional[BumpSchedule] = None) -> dict:
    return {
        "id": ad.id,
        "userId": ad.user_id,
        "name": ad.seller_name,
        "email": ad.email,
        "mobile": ad.mobile,
        "district": ad.district,
        "city": ad.city,
        "vehicleType": ad.vehicle_type,
        "condition": ad.condition,
        "make": ad.make,
        "model": ad.model,
        "year": ad.year,
        "price": ad.price,
        "ongoingLease": ad.ongoing_lease,
        "transmission": ad.transmission,
        "fuelType": ad.fuel_type,
        "engineCapacity": ad.engine_capacity,
        "mileage": ad.mileage,
        "description": ad.description,
        "views": ad.views,
        "status": ad.status,
        "promotion": ad.promotion,
        "createdAt": _iso(ad.created_at),
        "updatedAt": _iso(ad.updated_at),
        "bumpSchedule": serialize_schedule(schedule),
    }


async def _get_ad_or_404(db: AsyncSession, ad_id: int) -> VehicleAd:
    ad = await db.get(VehicleAd, ad_id)
    if ad is None:
        raise AdNotFoundError(ad_id)
    return ad


@router.get("/ads")
async def list_ads(
    promoted: Optional[bool] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
):
    # Newest first; a bump resets created_at so bumped ads float to the top
    stmt = (
        select(VehicleAd)
        .where(VehicleAd.status == STATUS_ACTIVE)
        .order_by(VehicleAd.created_at.desc(), VehicleAd.id.desc())
        .limit(limit)
    )
    if promoted is not None:
        if promoted:
            stmt = stmt.where(VehicleAd.promotion == PROMOTION_BOOSTED)
        else:
            stmt = stmt.where(VehicleAd.promotion != PROMOTION_BOOSTED)
    result = await db.execute(stmt)
    ads = result.scalars().all()
    return {"success": True, "data": [serialize_ad(ad) for ad in ads]}


@router.post("/ads", status_code=201)
async def create_ad(body: CreateAdRequest, db: AsyncSession = Depends(get_db)):
    ad = VehicleAd(**body.model_dump())
    db.add(ad)
    await db.commit()
    await db.refresh(ad)
    return {"success": True, "message": "Vehicle ad created.", "data": serialize_ad(ad)}


@router.get("/ads/{ad_id}")
async def get_ad(ad_id: int, db: AsyncSession = Depends(get_db)):
    ad = await _get_ad_or_404(db, ad_id)
    schedule = await get_schedule_for_ad(db, ad.id)
    return {"success": True, "data": serialize_ad(ad, schedule)}


@router.delete("/ads/{ad_id}", status_code=204)
async def delete_ad(ad_id: int, db: AsyncSession = Depends(get_db)):
    ad = await _get_ad_or_404(db, ad_id)
    ad.status = STATUS_INACTIVE
    await db.commit()


@router.post("/ads/{ad_id}/bump")
async def activate_ad_bump(
    ad_id: int,
    body: Optional[ActivateBumpRequest] = None,
    db: AsyncSession = Depends(get_db),
):
    body = body or ActivateBumpRequest()
    ad, schedule = await activate_bump(
        db,
        ad_id,
        remaining_bumps=body.remaining_bumps,
        interval_hours=body.interval_hours,
        start_at=body.start_at,
    )
    return {
        "success": True,
        "message": "Bump promotion activated.",
        "data": {
            "adId": ad.id,
            "promotion": ad.promotion,
            "schedule": serialize_schedule(schedule),
        },
    }


@router.get("/ads/{ad_id}/bump")
async def get_ad_bump(ad_id: int, db: AsyncSession = Depends(get_db)):
    ad = await _get_ad_or_404(db, ad_id)
    schedule = await get_schedule_for_ad(db, ad.id)
    if schedule is None:
        raise ScheduleNotFoundError(ad.id)
    return {"success": True, "data": serialize_schedule(schedule)}
