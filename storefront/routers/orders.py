"""Orders Router - the shopper's order history."""
from fastapi import APIRouter, Depends, HTTPException

from storefront.errors import ERROR_ORDER_LOAD_FAILED
from storefront.logging import clip, get_logger, mask_id
from storefront.services.database import Database
from storefront.services.models import AuthUser
from storefront.services.money import to_float
from storefront.utils.formatters import format_currency, generate_order_number
from .deps import get_current_user, get_db

logger = get_logger(__name__)

router = APIRouter(tags=["orders"])


@router.get("/orders")
async def list_orders(
    user: AuthUser = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Orders placed by the authenticated shopper, newest first."""
    try:
        orders = await db.get_orders_by_user(user.id)
    except Exception as e:
        logger.error(f"Failed to load orders for user {mask_id(user.id)}: {clip(e)}", exc_info=True)
        raise HTTPException(status_code=502, detail=ERROR_ORDER_LOAD_FAILED)

    return [
        {
            "id": order.id,
            "order_number": f"#{generate_order_number(order.id)}",
            "status": order.status,
            "status_label": order.status_label,
            "items_count": order.items_count,
            "total": to_float(order.total),
            "total_display": format_currency(order.total),
            "created_at": order.created_at.isoformat() if order.created_at else None,
        }
        for order in orders
    ]
