"""
Tailorbook Django adapter URL routing.
"""

from django.urls import path

from adapters.django_api import views


urlpatterns = [
    path("dashboard", views.dashboard_view),
    path("customers", views.customers_view),
    path("orders", views.orders_view),
    path("orders/commit", views.order_commit_view),
    path("orders/<str:order_id>/items", views.order_item_edit_view),
    path("orders/<str:order_id>/delete", views.order_delete_view),
    path("workers/<str:worker_id>/ledger", views.worker_ledger_view),
    path("ledger", views.ledger_view),
    path("ledger/expenses", views.expense_create_view),
]
