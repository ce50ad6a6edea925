"""
URL routing for restaurant and order API endpoints.

Restaurant browsing is public; everything else requires a logged-in user.
"""

from django.urls import path

from apps.web.restaurant import views

app_name = "restaurant"

urlpatterns = [
    # Customer orders
    path("order/", views.my_orders, name="my_orders"),
    path("order/<int:order_id>", views.order_detail, name="order_detail"),
    # Restaurant owner
    path("restaurant/orders", views.restaurant_orders, name="restaurant_orders"),
    path(
        "restaurant/order/<int:order_id>/status",
        views.update_order_status,
        name="order_status_update",
    ),
    # Public browsing
    path("restaurant/list/all", views.restaurant_list, name="restaurant_list"),
    path("restaurant/search/", views.restaurant_search, name="restaurant_search"),
    path(
        "restaurant/search/<str:search_text>",
        views.restaurant_search,
        name="restaurant_search_text",
    ),
    path(
        "restaurant/<int:restaurant_id>",
        views.restaurant_detail,
        name="restaurant_detail",
    ),
]
