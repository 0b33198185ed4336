from django.urls import path

from orders.api import views

urlpatterns = [
    path("api/orders", views.orders_collection, name="orders"),
    path("api/orders/<uuid:order_id>", views.order_detail, name="order-detail"),
    path("api/orders/<uuid:order_id>/status", views.update_order_status, name="order-status"),
    path("api/orders/<uuid:order_id>/cancel", views.cancel_order, name="order-cancel"),
    path("api/orders/<uuid:order_id>/notes", views.update_order_notes, name="order-notes"),
    path("api/payments/initiate", views.initiate_payment, name="payment-initiate"),
    path("api/payments/status/<uuid:order_id>", views.payment_status, name="payment-status"),
    path("api/payments/wave/callback", views.wave_callback, name="wave-callback"),
    path("api/payments/orange/callback", views.orange_callback, name="orange-callback"),
    path("api/payments/simulate-success", views.simulate_payment_success, name="payment-simulate"),
    path("api/health", views.health, name="health"),
    path("graphql/", views.graphql_view, name="graphql"),
]
