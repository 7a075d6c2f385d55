# app/api/subscriptions.py

import logging
from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from uuid import UUID
from typing import List, Optional

from app.core.exceptions import StoreError, SubscriptionNotFoundError
from app.database import get_subscription_store
from app.models.subscription import Subscription
from app.repositories.subscriptions import SubscriptionStore
from app.schemas.subscription import (
    SubscriptionCreate,
    SubscriptionRead,
    SubscriptionSummaryRead,
    SummaryPeriod,
)
from app.utils.date_helpers import parse_month

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])

DEFAULT_LIMIT = 50
DEFAULT_OFFSET = 0
INT64_MAX = 2**63 - 1


def _to_entity(data: SubscriptionCreate) -> Subscription:
    return Subscription(
        service_name=data.service_name,
        price=data.price,
        user_id=data.user_id,
        start_date=data.start_date,
        end_date=data.end_date,
    )


def _parse_user_id(value: Optional[str], required_message: str) -> UUID:
    if not value:
        raise HTTPException(status_code=400, detail=required_message)
    try:
        return UUID(value)
    except ValueError:
        logger.warning("invalid user_id: %r", value)
        raise HTTPException(status_code=400, detail="invalid user_id format")


def _page_param(value: Optional[str], default: int) -> int:
    # Valores no numéricos o negativos se ignoran y se mantiene el default
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


@router.post("", response_model=SubscriptionRead, status_code=status.HTTP_201_CREATED, response_model_exclude_none=True)
@router.post("/", response_model=SubscriptionRead, status_code=status.HTTP_201_CREATED, response_model_exclude_none=True, include_in_schema=False)
async def create_subscription(
    subscription_data: SubscriptionCreate,
    store: SubscriptionStore = Depends(get_subscription_store),
):
    logger.info("create subscription request")
    try:
        return await store.create(_to_entity(subscription_data))
    except StoreError as exc:
        logger.error("failed to create subscription: %s", exc)
        raise HTTPException(status_code=500, detail="failed to create subscription")


@router.get("", response_model=List[SubscriptionRead], response_model_exclude_none=True)
@router.get("/", response_model=List[SubscriptionRead], response_model_exclude_none=True, include_in_schema=False)
async def list_subscriptions(
    user_id: Optional[str] = Query(None),
    service_name: Optional[str] = Query(None),
    limit: Optional[str] = Query(None, description="Default 50; non-numeric values are ignored"),
    offset: Optional[str] = Query(None, description="Default 0; non-numeric values are ignored"),
    store: SubscriptionStore = Depends(get_subscription_store),
):
    logger.info("list subscriptions request")
    parsed_user_id = _parse_user_id(user_id, "user_id required")
    if not service_name:
        raise HTTPException(status_code=400, detail="service_name required")

    page_limit = _page_param(limit, DEFAULT_LIMIT)
    page_offset = _page_param(offset, DEFAULT_OFFSET)

    try:
        return await store.list(page_limit, page_offset, parsed_user_id, service_name)
    except StoreError as exc:
        logger.error("failed to list subscriptions user_id=%s service_name=%s: %s", parsed_user_id, service_name, exc)
        raise HTTPException(status_code=500, detail="failed to list subscriptions")


# Debe declararse antes de /{subscription_id}
@router.get("/summary", response_model=SubscriptionSummaryRead)
async def summary_subscriptions(
    from_: Optional[str] = Query(None, alias="from", description="MM-YYYY"),
    to: Optional[str] = Query(None, description="MM-YYYY"),
    user_id: Optional[str] = Query(None),
    service_name: Optional[str] = Query(None),
    store: SubscriptionStore = Depends(get_subscription_store),
):
    logger.info("summary subscriptions request")
    if not from_ or not to:
        raise HTTPException(status_code=400, detail="from and to are required (MM-YYYY)")

    try:
        from_month = parse_month(from_, "from date")
    except ValueError:
        logger.warning("invalid from date: %r", from_)
        raise HTTPException(status_code=400, detail="invalid from date format, expected MM-YYYY")

    try:
        to_month = parse_month(to, "to date")
    except ValueError:
        logger.warning("invalid to date: %r", to)
        raise HTTPException(status_code=400, detail="invalid to date format, expected MM-YYYY")

    parsed_user_id = _parse_user_id(user_id, "user_id is required")
    if not service_name:
        raise HTTPException(status_code=400, detail="service_name is required")

    logger.info(
        "calculating subscription sum user_id=%s service_name=%s from=%s to=%s",
        parsed_user_id, service_name, from_, to,
    )

    try:
        total = await store.sum_by_period(from_month, to_month, parsed_user_id, service_name)
    except StoreError as exc:
        logger.error("failed to calculate sum: %s", exc)
        raise HTTPException(status_code=500, detail="failed to calculate sum")

    return SubscriptionSummaryRead(
        total=total,
        user_id=parsed_user_id,
        service_name=service_name,
        period=SummaryPeriod(from_=from_, to=to),
    )


@router.get("/{subscription_id}", response_model=SubscriptionRead, response_model_exclude_none=True)
async def get_subscription(
    subscription_id: int = Path(..., le=INT64_MAX),
    store: SubscriptionStore = Depends(get_subscription_store),
):
    logger.info("get subscription request")
    try:
        return await store.get(subscription_id)
    except SubscriptionNotFoundError:
        logger.warning("subscription not found id=%s", subscription_id)
        raise HTTPException(status_code=404, detail="not found")
    except StoreError as exc:
        logger.error("failed to get subscription id=%s: %s", subscription_id, exc)
        raise HTTPException(status_code=500, detail="failed to get subscription")


@router.put("/{subscription_id}", response_model=SubscriptionRead, response_model_exclude_none=True)
async def update_subscription(
    subscription_data: SubscriptionCreate,
    subscription_id: int = Path(..., le=INT64_MAX),
    store: SubscriptionStore = Depends(get_subscription_store),
):
    logger.info("update subscription request")
    # No se comprueba que el id exista: un id inexistente "se actualiza" sin efecto
    try:
        return await store.update(subscription_id, _to_entity(subscription_data))
    except StoreError as exc:
        logger.error("failed to update subscription id=%s: %s", subscription_id, exc)
        raise HTTPException(status_code=500, detail="failed to update subscription")


@router.delete("/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subscription(
    subscription_id: int = Path(..., le=INT64_MAX),
    store: SubscriptionStore = Depends(get_subscription_store),
):
    logger.info("delete subscription request")
    try:
        await store.delete(subscription_id)
    except SubscriptionNotFoundError:
        logger.warning("failed to delete subscription id=%s: not found", subscription_id)
        raise HTTPException(status_code=404, detail="not found")
    except StoreError as exc:
        logger.error("failed to delete subscription id=%s: %s", subscription_id, exc)
        raise HTTPException(status_code=500, detail="failed to delete subscription")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
