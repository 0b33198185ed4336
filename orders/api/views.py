"""
REST and GraphQL views for orders and payments.
"""
import json
import logging
from functools import wraps
from uuid import UUID

from ariadne import graphql_sync
from django.conf import settings
from django.db import DatabaseError, connection
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from orders.api.auth import ROLE_ADMIN, check_order_access, require_identity
from orders.api.idempotency import idempotent
from orders.api.middleware import ErrorHandler
from orders.api.schema import format_graphql_error, schema
from orders.api.serializers import serialize_order
from orders.domain.exceptions import InvalidInput, SimulationDisabled
from orders.domain.order import CustomerInfo
from orders.infra.pii_masker import mask_pii_in_dict
from orders.services import OrderService, PaymentService, WebhookProcessor
from orders.services.orders import parse_uuid
from orders.services.providers import simulation_enabled

logger = logging.getLogger(__name__)


REQUIRED_ORDER_FIELDS = ("customer_name", "customer_email", "customer_phone", "items")


def json_api(view):
    """Translate raised errors into JSON error responses."""
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except Exception as e:
            return ErrorHandler.handle_error(e)
    return wrapper


def read_json(request) -> dict:
    """Parse the request body as a JSON object."""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except json.JSONDecodeError:
        raise InvalidInput("Invalid JSON")
    if not isinstance(data, dict):
        raise InvalidInput("Request body must be a JSON object")
    return data


# Orders

@csrf_exempt
@require_http_methods(["GET", "POST"])
def orders_collection(request):
    if request.method == "POST":
        return create_order(request)
    return list_orders(request)


@json_api
@require_identity()
@idempotent("CREATE_ORDER")
def create_order(request):
    data = read_json(request)
    missing = [field for field in REQUIRED_ORDER_FIELDS if not data.get(field)]
    if missing:
        raise InvalidInput(f"Missing required fields: {', '.join(missing)}")

    identity = request.identity
    user_id = identity.user_id
    if identity.is_admin and data.get("user_id"):
        user_id = parse_uuid(data["user_id"], "user_id")

    customer = CustomerInfo(
        name=data["customer_name"],
        email=data["customer_email"],
        phone=data["customer_phone"],
        delivery_address=data.get("delivery_address") or None,
        user_id=user_id,
        notes=data.get("customer_notes") or "",
    )
    logger.info(
        "create_order_request",
        extra={
            "request_id": getattr(request, "request_id", None),
            "customer": mask_pii_in_dict({
                "customer_name": customer.name,
                "customer_email": customer.email,
                "customer_phone": customer.phone,
            }),
        },
    )

    order = OrderService().create_order(
        customer=customer,
        delivery_method=data.get("delivery_method") or "pickup",
        payment_method=data.get("payment_method") or "cash",
        items=data["items"],
    )
    return JsonResponse(
        {"success": True, "message": "Order created", "data": serialize_order(order, identity.is_admin)},
        status=201,
    )


@json_api
@require_identity(ROLE_ADMIN)
def list_orders(request):
    try:
        limit = min(int(request.GET.get("limit", 50)), 200)
        offset = max(int(request.GET.get("offset", 0)), 0)
    except ValueError:
        raise InvalidInput("limit and offset must be integers")

    orders = OrderService().list_orders(
        status=request.GET.get("status") or None,
        user_id=request.GET.get("user_id") or None,
        limit=limit,
        offset=offset,
    )
    return JsonResponse({
        "success": True,
        "count": len(orders),
        "data": [serialize_order(order, include_admin=True, include_items=False) for order in orders],
    })


@csrf_exempt
@require_http_methods(["GET"])
@json_api
@require_identity()
def order_detail(request, order_id: UUID):
    order = OrderService().get_order(order_id)
    check_order_access(request.identity, order)
    return JsonResponse({"success": True, "data": serialize_order(order, request.identity.is_admin)})


@csrf_exempt
@require_http_methods(["PATCH"])
@json_api
@require_identity(ROLE_ADMIN)
def update_order_status(request, order_id: UUID):
    data = read_json(request)
    if not data.get("status"):
        raise InvalidInput("status is required")

    order = OrderService().update_order_status(order_id, data["status"])
    return JsonResponse({
        "success": True,
        "message": "Order status updated",
        "data": serialize_order(order, include_admin=True),
    })


@csrf_exempt
@require_http_methods(["PATCH"])
@json_api
@require_identity()
def cancel_order(request, order_id: UUID):
    service = OrderService()
    check_order_access(request.identity, service.get_order(order_id))

    order = service.cancel_order(order_id)
    return JsonResponse({
        "success": True,
        "message": "Order cancelled",
        "data": serialize_order(order, request.identity.is_admin),
    })


@csrf_exempt
@require_http_methods(["PATCH"])
@json_api
@require_identity(ROLE_ADMIN)
def update_order_notes(request, order_id: UUID):
    data = read_json(request)
    if "admin_notes" not in data:
        raise InvalidInput("admin_notes is required")

    order = OrderService().update_admin_notes(order_id, data["admin_notes"])
    return JsonResponse({"success": True, "data": serialize_order(order, include_admin=True)})


# Payments

@csrf_exempt
@require_http_methods(["POST"])
@json_api
@require_identity()
@idempotent("INITIATE_PAYMENT")
def initiate_payment(request):
    data = read_json(request)
    if not data.get("order_id") or not data.get("payment_method"):
        raise InvalidInput("order_id and payment_method are required")

    order_id = parse_uuid(data["order_id"], "order_id")
    check_order_access(request.identity, OrderService().get_order(order_id))

    initiation = PaymentService().initiate_payment(
        order_id=order_id,
        payment_method=data["payment_method"],
        phone_number=data.get("phone_number"),
    )
    return JsonResponse({"success": True, "message": "Payment initiated", "data": initiation.as_dict()})


@csrf_exempt
@require_http_methods(["GET"])
@json_api
@require_identity()
def payment_status(request, order_id: UUID):
    check_order_access(request.identity, OrderService().get_order(order_id))
    return JsonResponse({"success": True, "data": PaymentService().get_payment_status(order_id)})


def _webhook(request, provider_name: str) -> JsonResponse:
    try:
        payload = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        payload = None

    result = WebhookProcessor().handle(provider_name, payload)
    return JsonResponse(result.as_dict())


@csrf_exempt
@require_http_methods(["POST"])
def wave_callback(request):
    return _webhook(request, "wave")


@csrf_exempt
@require_http_methods(["POST"])
def orange_callback(request):
    return _webhook(request, "orange_money")


@csrf_exempt
@require_http_methods(["POST"])
@json_api
def simulate_payment_success(request):
    if not simulation_enabled():
        raise SimulationDisabled()

    data = read_json(request)
    if not data.get("order_id"):
        raise InvalidInput("order_id is required")

    order = PaymentService().simulate_success(parse_uuid(data["order_id"], "order_id"))
    return JsonResponse({
        "success": True,
        "message": "Payment simulated",
        "data": {
            "order_id": order.id,
            "payment_status": order.payment_status.value,
            "order_status": order.order_status.value,
            "payment_reference": order.payment_reference,
            "simulation": True,
        },
    })


# Service

@require_http_methods(["GET"])
def health(request):
    try:
        connection.ensure_connection()
        database = "connected"
    except DatabaseError as e:
        logger.error("health_database_error", extra={"error": str(e)})
        database = "disconnected"

    return JsonResponse(
        {"status": "ok" if database == "connected" else "degraded", "database": database, "environment": settings.APP_ENV},
        status=200 if database == "connected" else 503,
    )


@csrf_exempt
@require_http_methods(["GET", "POST"])
def graphql_view(request):
    """GraphQL endpoint."""
    if request.method == "GET":
        return JsonResponse({"message": "GraphQL endpoint. Use POST for queries."})

    try:
        data = json.loads(request.body)
    except json.JSONDecodeError:
        return JsonResponse({"error": {"code": "VALIDATION_ERROR", "message": "Invalid JSON"}}, status=400)

    success, result = graphql_sync(
        schema,
        data,
        context_value={"request": request},
        error_formatter=format_graphql_error,
        debug=settings.DEBUG,
    )
    return JsonResponse(result, status=200 if success else 400)
