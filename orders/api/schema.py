"""
GraphQL schema definition using Ariadne.
"""
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from uuid import UUID

from ariadne import (
    MutationType,
    QueryType,
    ScalarType,
    format_error,
    load_schema_from_path,
    make_executable_schema,
    unwrap_graphql_error,
)
from graphql import GraphQLError

from orders.api.auth import ROLE_ADMIN, check_identity, check_order_access
from orders.api.serializers import serialize_order
from orders.domain.exceptions import DomainError
from orders.domain.order import CustomerInfo
from orders.services import OrderService, PaymentService

logger = logging.getLogger(__name__)

# Load schema from .graphql files
SCHEMAS_DIR = Path(__file__).parent / "schemas"
type_defs = "\n".join([
    load_schema_from_path(SCHEMAS_DIR / "common.graphql"),
    load_schema_from_path(SCHEMAS_DIR / "query.graphql"),
    load_schema_from_path(SCHEMAS_DIR / "mutation.graphql"),
])

query = QueryType()
mutation = MutationType()


def _identity(info, *roles):
    return check_identity(info.context["request"], *roles)


@query.field("order")
def resolve_order(_, info, id):
    """Resolve a single order visible to the caller."""
    identity = _identity(info)
    order = OrderService().get_order(id)
    check_order_access(identity, order)
    return serialize_order(order, include_admin=identity.is_admin)


@query.field("orders")
def resolve_orders(_, info, status=None, user_id=None, limit=50, offset=0):
    """Resolve the admin order listing."""
    _identity(info, ROLE_ADMIN)
    orders = OrderService().list_orders(
        status=status,
        user_id=user_id,
        limit=min(limit, 200),
        offset=max(offset, 0),
    )
    return [serialize_order(order, include_admin=True) for order in orders]


@query.field("paymentStatus")
def resolve_payment_status(_, info, order_id):
    identity = _identity(info)
    check_order_access(identity, OrderService().get_order(order_id))
    return PaymentService().get_payment_status(order_id)


@mutation.field("createOrder")
def resolve_create_order(_, info, input: dict):
    """Resolve create order mutation."""
    identity = _identity(info)
    user_id = identity.user_id
    if identity.is_admin and input.get("user_id"):
        user_id = input["user_id"]

    customer = CustomerInfo(
        name=input["customer_name"],
        email=input["customer_email"],
        phone=input["customer_phone"],
        delivery_address=input.get("delivery_address") or None,
        user_id=user_id,
        notes=input.get("customer_notes") or "",
    )
    order = OrderService().create_order(
        customer=customer,
        delivery_method=input.get("delivery_method") or "pickup",
        payment_method=input.get("payment_method") or "cash",
        items=[dict(item) for item in input["items"]],
    )
    return serialize_order(order, include_admin=identity.is_admin)


@mutation.field("cancelOrder")
def resolve_cancel_order(_, info, id):
    identity = _identity(info)
    service = OrderService()
    check_order_access(identity, service.get_order(id))
    return serialize_order(service.cancel_order(id), include_admin=identity.is_admin)


@mutation.field("updateOrderStatus")
def resolve_update_order_status(_, info, id, status):
    _identity(info, ROLE_ADMIN)
    return serialize_order(OrderService().update_order_status(id, status), include_admin=True)


@mutation.field("initiatePayment")
def resolve_initiate_payment(_, info, input: dict):
    """Resolve initiate payment mutation."""
    identity = _identity(info)
    check_order_access(identity, OrderService().get_order(input["order_id"]))
    initiation = PaymentService().initiate_payment(
        order_id=input["order_id"],
        payment_method=input["payment_method"],
        phone_number=input.get("phone_number"),
    )
    return initiation.as_dict()


def format_graphql_error(error: GraphQLError, debug: bool = False) -> dict:
    """Expose domain error codes; hide details of unexpected failures."""
    formatted = format_error(error, debug)
    original = unwrap_graphql_error(error)
    if isinstance(original, DomainError):
        formatted["message"] = original.message
        formatted.setdefault("extensions", {})["code"] = original.code
    elif original is not None and not isinstance(original, GraphQLError):
        logger.error(
            "graphql_unexpected_error",
            extra={"error_type": type(original).__name__, "error": str(original)},
            exc_info=original,
        )
        if not debug:
            formatted["message"] = "An internal error occurred"
        formatted.setdefault("extensions", {})["code"] = "INTERNAL_ERROR"
    return formatted


# Define custom scalars
decimal_scalar = ScalarType("Decimal")
uuid_scalar = ScalarType("UUID")
datetime_scalar = ScalarType("DateTime")


@decimal_scalar.serializer
def serialize_decimal(value):
    """Serialize Decimal to string."""
    return str(value)


@decimal_scalar.value_parser
def parse_decimal_value(value):
    """Parse Decimal from string or number."""
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid decimal: {value!r}")


@uuid_scalar.serializer
def serialize_uuid(value):
    """Serialize UUID to string."""
    return str(value)


@uuid_scalar.value_parser
def parse_uuid_value(value):
    """Parse UUID from string."""
    if isinstance(value, UUID):
        return value
    return UUID(str(value))


@datetime_scalar.serializer
def serialize_datetime(value):
    """Serialize DateTime to ISO format string."""
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


@datetime_scalar.value_parser
def parse_datetime_value(value):
    """Parse DateTime from ISO string."""
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


# Create executable schema
schema = make_executable_schema(
    type_defs,
    query,
    mutation,
    datetime_scalar,
    decimal_scalar,
    uuid_scalar,
    convert_names_case=True,
)
