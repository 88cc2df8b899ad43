"""
Tailorbook Django Adapter Views
=================================
Pass-through JSON views over the engines and projections.

Every view resolves the principal from the X-API-KEY header first;
without a fully-authenticated principal it answers 401 and touches no
collection. Reads open the live collections for the duration of the
request only.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Optional

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from adapters.django_api.wiring import TailorbookDependencies, build_dependencies
from core.auth.provider import (
    NotAuthenticatedError,
    PrincipalProvider,
    collection_path,
    require_principal,
)
from core.commands.rejection import RejectionReason
from core.context.live import LiveCollections
from engines.catalog.errors import CatalogValidationError, CatalogWriteError
from engines.catalog.services import CatalogService
from engines.orders.draft import load_draft
from engines.orders.errors import InvalidItemPath, OrderCommitError, OrderValidationError
from engines.orders.item_workflow import OUTCOME_ROLLED_BACK, ItemFieldEditor
from engines.orders.services import OrderService
from projections.customers import search_customers
from projections.ledger import TransactionFilter, filter_transactions
from projections.orders.filters import OrderFilter, filter_orders

logger = logging.getLogger("tailorbook.http")

HEADER_API_KEY = "X-API-KEY"


# ══════════════════════════════════════════════════════════════
# RESPONSE ENVELOPE
# ══════════════════════════════════════════════════════════════

def success_response(data: Any, status: int = 200) -> JsonResponse:
    return JsonResponse({"ok": True, "data": data}, status=status)


def _json_error(
    code: str, message: str, status: int = 400, details: Optional[dict] = None,
) -> JsonResponse:
    return JsonResponse(
        {"ok": False, "error": {"code": code, "message": message, "details": details or {}}},
        status=status,
    )


def _rejection_error(reason: RejectionReason, status: int = 422) -> JsonResponse:
    return _json_error(
        reason.code,
        reason.message,
        status=status,
        details={"policy_name": reason.policy_name, "step": reason.step},
    )


def _method_not_allowed() -> JsonResponse:
    return _json_error(
        "METHOD_NOT_ALLOWED",
        "Method not allowed for this endpoint.",
        status=405,
    )


# ══════════════════════════════════════════════════════════════
# REQUEST HELPERS
# ══════════════════════════════════════════════════════════════

def _parse_json_body(request: HttpRequest) -> Dict[str, Any]:
    if not request.body:
        return {}
    try:
        parsed = json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise ValueError("Request body must be valid JSON.") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object.")
    return parsed


def _parse_index(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field_name} must be an integer.")
    return value


def _authenticated(
    request: HttpRequest, deps: TailorbookDependencies,
) -> Optional[PrincipalProvider]:
    provider = deps.api_keys.provider_for(request.headers.get(HEADER_API_KEY))
    try:
        require_principal(provider)
    except NotAuthenticatedError as exc:
        logger.warning(f"Refused {request.method} {request.path}: {exc}")
        return None
    return provider


def _unauthorized() -> JsonResponse:
    return _json_error(
        "NOT_AUTHENTICATED",
        f"Missing or unknown {HEADER_API_KEY} header.",
        status=401,
    )


def _with_live(
    request: HttpRequest,
    read: Callable[[LiveCollections, TailorbookDependencies], JsonResponse],
) -> JsonResponse:
    deps = build_dependencies()
    provider = _authenticated(request, deps)
    if provider is None:
        return _unauthorized()
    live = LiveCollections(
        store=deps.store, principal_provider=provider, rules=deps.rules, clock=deps.clock,
    )
    live.open()
    try:
        return read(live, deps)
    finally:
        live.close()


def _order_payload(order) -> dict:
    document = order.to_document()
    document["id"] = order.id
    return document


# ══════════════════════════════════════════════════════════════
# READ VIEWS
# ══════════════════════════════════════════════════════════════

@csrf_exempt
def dashboard_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _with_live(request, lambda live, deps: success_response(live.dashboard().to_dict()))


@csrf_exempt
def customers_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()

    def read(live: LiveCollections, deps: TailorbookDependencies) -> JsonResponse:
        directory = search_customers(live.customer_directory(), request.GET.get("search", ""))
        return success_response([summary.to_dict() for summary in directory])

    return _with_live(request, read)


@csrf_exempt
def orders_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()

    def read(live: LiveCollections, deps: TailorbookDependencies) -> JsonResponse:
        criteria = OrderFilter(
            search=request.GET.get("search", ""),
            status=request.GET.get("status", ""),
            pending_only=request.GET.get("pending") in ("1", "true"),
            start_date=request.GET.get("start") or None,
            end_date=request.GET.get("end") or None,
        )
        orders = filter_orders(live.orders, criteria, deps.rules.tz)
        return success_response([_order_payload(order) for order in orders])

    return _with_live(request, read)


@csrf_exempt
def worker_ledger_view(request: HttpRequest, worker_id: str) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()

    def read(live: LiveCollections, deps: TailorbookDependencies) -> JsonResponse:
        live.watch_worker_payments(worker_id)
        ledger = live.worker_ledger(worker_id)
        if ledger is None:
            return _json_error("NOT_FOUND", f"Worker {worker_id} not found.", status=404)
        return success_response(ledger.to_dict())

    return _with_live(request, read)


@csrf_exempt
def ledger_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()

    def read(live: LiveCollections, deps: TailorbookDependencies) -> JsonResponse:
        criteria = TransactionFilter(
            search=request.GET.get("search", ""),
            type=request.GET.get("type", ""),
            start_date=request.GET.get("start") or None,
            end_date=request.GET.get("end") or None,
        )
        rows = filter_transactions(live.transactions, criteria, deps.rules.tz)
        return success_response({
            "balance": live.ledger_balance(),
            "transactions": [dict(row.to_document(), id=row.id) for row in rows],
        })

    return _with_live(request, read)


# ══════════════════════════════════════════════════════════════
# WRITE VIEWS
# ══════════════════════════════════════════════════════════════

@csrf_exempt
def order_commit_view(request: HttpRequest) -> JsonResponse:
    """
    Body: {"order": <stored-shape order>, "order_id": <id or absent>}.
    An absent order_id places a new order. With an order_id the body is
    laid over the stored order, so fields left out keep their stored values.
    """
    if request.method != "POST":
        return _method_not_allowed()
    deps = build_dependencies()
    provider = _authenticated(request, deps)
    if provider is None:
        return _unauthorized()
    try:
        body = _parse_json_body(request)
        document = body.get("order")
        if not isinstance(document, dict):
            raise ValueError("order must be an object.")
    except ValueError as exc:
        return _json_error("INVALID_REQUEST", str(exc))

    order_id = body.get("order_id") or None
    if order_id is not None:
        stored = deps.store.get_once(collection_path(provider, deps.rules, "orders"), order_id)
        if stored is None:
            return _json_error("NOT_FOUND", f"Order {order_id} not found.", status=404)
        stored.pop("id", None)
        document = {**stored, **document}

    master_items = deps.store.query(
        collection_path(provider, deps.rules, "tailoringItems"), {},
    )
    draft = load_draft(document, master_items, doc_id=order_id)
    draft.is_new = order_id is None

    service = OrderService(
        store=deps.store, principal_provider=provider, rules=deps.rules, clock=deps.clock,
    )
    try:
        result = service.commit(draft)
    except OrderValidationError as exc:
        return _rejection_error(exc.reason)
    except OrderCommitError as exc:
        return _json_error("COMMIT_FAILED", str(exc), status=503)
    return success_response(result.to_dict(), status=201 if result.created else 200)


@csrf_exempt
def order_item_edit_view(request: HttpRequest, order_id: str) -> JsonResponse:
    """Body: {"person_index", "item_index", "field": status|cutter|sewer, "value"}."""
    if request.method != "POST":
        return _method_not_allowed()
    deps = build_dependencies()
    provider = _authenticated(request, deps)
    if provider is None:
        return _unauthorized()
    try:
        body = _parse_json_body(request)
        person_index = _parse_index(body.get("person_index"), "person_index")
        item_index = _parse_index(body.get("item_index"), "item_index")
        field_name = str(body.get("field", ""))
    except ValueError as exc:
        return _json_error("INVALID_REQUEST", str(exc))

    live = LiveCollections(
        store=deps.store, principal_provider=provider, rules=deps.rules, clock=deps.clock,
    )
    live.open()
    try:
        order = live.find_order(order_id)
    finally:
        live.close()
    if order is None:
        return _json_error("NOT_FOUND", f"Order {order_id} not found.", status=404)

    editor = ItemFieldEditor(
        store=deps.store,
        principal_provider=provider,
        rules=deps.rules,
        on_view_state=lambda _order: None,
    )
    try:
        result = editor.edit(order, person_index, item_index, field_name, body.get("value"))
    except OrderValidationError as exc:
        return _rejection_error(exc.reason)
    except InvalidItemPath as exc:
        return _json_error("INVALID_ITEM_PATH", str(exc), status=404)

    if result.outcome == OUTCOME_ROLLED_BACK:
        return _json_error("COMMIT_FAILED", result.notice, status=503)
    return success_response({"outcome": result.outcome, "order": _order_payload(result.order)})


@csrf_exempt
def order_delete_view(request: HttpRequest, order_id: str) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    deps = build_dependencies()
    provider = _authenticated(request, deps)
    if provider is None:
        return _unauthorized()
    service = OrderService(
        store=deps.store, principal_provider=provider, rules=deps.rules, clock=deps.clock,
    )
    try:
        removed = service.delete(order_id)
    except OrderCommitError as exc:
        return _json_error("COMMIT_FAILED", str(exc), status=503)
    return success_response({"order_id": order_id, "ledger_rows_removed": removed})


@csrf_exempt
def expense_create_view(request: HttpRequest) -> JsonResponse:
    """Body: {"description", "amount"}."""
    if request.method != "POST":
        return _method_not_allowed()
    deps = build_dependencies()
    provider = _authenticated(request, deps)
    if provider is None:
        return _unauthorized()
    try:
        body = _parse_json_body(request)
    except ValueError as exc:
        return _json_error("INVALID_REQUEST", str(exc))
    service = CatalogService(
        store=deps.store, principal_provider=provider, rules=deps.rules, clock=deps.clock,
    )
    try:
        doc_id = service.record_expense(body)
    except CatalogValidationError as exc:
        return _rejection_error(exc.reason)
    except CatalogWriteError as exc:
        return _json_error("COMMIT_FAILED", str(exc), status=503)
    return success_response({"id": doc_id}, status=201)
