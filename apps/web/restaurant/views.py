"""
Restaurant and Order API views.

These endpoints are used by the frontend:
- Browse: Active restaurant listing and search by location, name and cuisine
- Restaurant page: Public restaurant detail with its menu, used to build carts
- Order history: The customer's own orders
- Restaurant dashboard: Orders placed at the owner's restaurant, status updates
"""

import json
import logging

from django.db.models import Q
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from pydantic import ValidationError as PydanticValidationError

from apps.web.core.decorators import login_required_json
from apps.web.core.responses import (
    error_response,
    json_response,
    validation_error_response,
)
from apps.web.restaurant.models import (
    ORDER_STATUS_SEQUENCE,
    Order,
    Restaurant,
)
from apps.web.restaurant.serializers import (
    OrderStatusUpdateRequest,
    serialize_order,
    serialize_restaurant,
)

logger = logging.getLogger(__name__)


@require_GET
def restaurant_detail(_request: HttpRequest, restaurant_id: int) -> JsonResponse:
    """
    GET /api/v1/restaurant/{restaurant_id}

    Public restaurant detail with available menu items and their options.
    """
    restaurant = (
        Restaurant.objects.filter(pk=restaurant_id, is_active=True)
        .prefetch_related("menu_items", "menu_items__options")
        .first()
    )
    if restaurant is None:
        return error_response("Restaurant not found", status=404)

    return json_response(
        {
            "success": True,
            "restaurant": serialize_restaurant(restaurant).model_dump(
                mode="json", by_alias=True
            ),
        }
    )


def _restaurant_list_response(restaurants) -> JsonResponse:
    data = [
        serialize_restaurant(restaurant).model_dump(mode="json", by_alias=True)
        for restaurant in restaurants
    ]
    return json_response({"success": True, "count": len(data), "restaurants": data})


@require_GET
def restaurant_list(_request: HttpRequest) -> JsonResponse:
    """
    GET /api/v1/restaurant/list/all

    Every active restaurant with its menu, newest first.
    """
    restaurants = (
        Restaurant.objects.filter(is_active=True)
        .prefetch_related("menu_items", "menu_items__options")
        .order_by("-created_at", "-pk")
    )
    return _restaurant_list_response(restaurants)


@require_GET
def restaurant_search(request: HttpRequest, search_text: str = "") -> JsonResponse:
    """
    GET /api/v1/restaurant/search/{search_text}?searchQuery=&selectedCuisines=

    Search active restaurants. All given filters must match:
    - search_text: restaurant name, city or country contains it
    - searchQuery: restaurant name or a cuisine contains it
    - selectedCuisines: comma-separated; any one cuisine matches
    """
    search_text = search_text.strip()
    search_query = request.GET.get("searchQuery", "").strip()
    selected_cuisines = [
        cuisine.strip()
        for cuisine in request.GET.get("selectedCuisines", "").split(",")
        if cuisine.strip()
    ]

    restaurants = Restaurant.objects.filter(is_active=True)

    if search_text:
        restaurants = restaurants.filter(
            Q(restaurant_name__icontains=search_text)
            | Q(city__icontains=search_text)
            | Q(country__icontains=search_text)
        )

    # The location box and the query box often carry the same text
    if search_query and search_query != search_text:
        restaurants = restaurants.filter(
            Q(restaurant_name__icontains=search_query)
            | Q(cuisines__icontains=search_query)
        )

    if selected_cuisines:
        cuisine_filter = Q()
        for cuisine in selected_cuisines:
            cuisine_filter |= Q(cuisines__icontains=cuisine)
        restaurants = restaurants.filter(cuisine_filter)

    logger.debug(
        "Restaurant search text=%r query=%r cuisines=%s",
        search_text,
        search_query,
        selected_cuisines,
    )

    restaurants = restaurants.prefetch_related("menu_items", "menu_items__options")
    return _restaurant_list_response(restaurants)


@require_GET
@login_required_json
def my_orders(request: HttpRequest) -> JsonResponse:
    """
    GET /api/v1/order/

    The authenticated customer's orders, newest first.
    """
    orders = Order.objects.for_user(request).order_by("-created_at")
    return json_response(
        {"success": True, "orders": [serialize_order(order) for order in orders]}
    )


@require_GET
@login_required_json
def order_detail(request: HttpRequest, order_id: int) -> JsonResponse:
    """
    GET /api/v1/order/{order_id}

    Response: {success, order} (200), 404 if missing, 403 if not the caller's
    """
    order = Order.objects.filter(pk=order_id).first()
    if order is None:
        return error_response("Order not found", status=404)
    if order.user_id != request.user.pk:
        return error_response("You can't view this order", status=403)

    return json_response({"success": True, "order": serialize_order(order)})


@require_GET
@login_required_json
def restaurant_orders(request: HttpRequest) -> JsonResponse:
    """
    GET /api/v1/restaurant/orders

    Orders placed at the authenticated owner's active restaurant.
    """
    restaurant = request.restaurant  # type: ignore[attr-defined]
    if restaurant is None:
        return error_response("Restaurant not found", status=404)

    orders = Order.objects.filter(restaurant=restaurant).order_by("-created_at")
    return json_response(
        {"success": True, "orders": [serialize_order(order) for order in orders]}
    )


@csrf_exempt
@require_http_methods(["PATCH", "PUT"])
@login_required_json
def update_order_status(request: HttpRequest, order_id: int) -> JsonResponse:
    """
    PATCH /api/v1/restaurant/order/{order_id}/status

    Move an order through its fulfillment lifecycle. Only the owner of the
    order's restaurant may do this, whether or not that restaurant is still
    active.

    Request body: {status}
    Response: {success, status, message} (200)
    """
    order = Order.objects.select_related("restaurant").filter(pk=order_id).first()
    if order is None:
        return error_response("Order not found", status=404)
    if order.restaurant.owner_id != request.user.pk:
        return error_response("Order does not belong to your restaurant", status=403)

    try:
        body = json.loads(request.body)
        update = OrderStatusUpdateRequest.model_validate(body)
    except json.JSONDecodeError:
        return error_response("Invalid JSON in request body", status=400)
    except PydanticValidationError as e:
        return validation_error_response(e)

    previous = order.status
    if ORDER_STATUS_SEQUENCE.index(update.status) < ORDER_STATUS_SEQUENCE.index(
        previous
    ):
        logger.warning(
            "Order %s moved backward from %s to %s by user %s",
            order.pk,
            previous,
            update.status,
            request.user.pk,
        )

    order.status = update.status
    order.save(update_fields=["status", "updated_at"])

    logger.info("Order %s status %s -> %s", order.pk, previous, order.status)

    return json_response(
        {
            "success": True,
            "status": order.status,
            "message": "Status updated",
        }
    )
