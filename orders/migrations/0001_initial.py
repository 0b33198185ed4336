import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ProductORM",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=200)),
                ("slug", models.SlugField(max_length=200, unique=True)),
                ("price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("unit", models.CharField(default="unité", max_length=50)),
                ("stock_quantity", models.IntegerField(default=0)),
                ("sales_count", models.IntegerField(default=0)),
                ("is_available", models.BooleanField(default=True)),
            ],
            options={
                "db_table": "products",
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("stock_quantity__gte", 0)), name="product_stock_non_negative"),
                    models.CheckConstraint(condition=models.Q(("sales_count__gte", 0)), name="product_sales_non_negative"),
                    models.CheckConstraint(condition=models.Q(("price__gte", 0)), name="product_price_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderORM",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("user_id", models.UUIDField(blank=True, null=True)),
                ("customer_name", models.CharField(max_length=200)),
                ("customer_email", models.CharField(max_length=255)),
                ("customer_phone", models.CharField(max_length=20)),
                ("delivery_address", models.TextField(blank=True, null=True)),
                ("delivery_method", models.CharField(choices=[("pickup", "Retrait à la ferme"), ("delivery", "Livraison")], default="pickup", max_length=50)),
                ("payment_method", models.CharField(choices=[("wave", "Wave"), ("orange_money", "Orange Money"), ("cash", "Espèces")], max_length=50)),
                ("payment_status", models.CharField(choices=[("pending", "En attente"), ("completed", "Payé"), ("failed", "Échoué"), ("refunded", "Remboursé")], default="pending", max_length=50)),
                ("payment_reference", models.CharField(blank=True, max_length=200, null=True)),
                ("subtotal", models.DecimalField(decimal_places=2, max_digits=10)),
                ("delivery_fee", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=10)),
                ("order_status", models.CharField(choices=[("pending", "En attente"), ("confirmed", "Confirmée"), ("preparing", "En préparation"), ("ready", "Prête"), ("completed", "Terminée"), ("cancelled", "Annulée")], default="pending", max_length=50)),
                ("customer_notes", models.TextField(blank=True, default="")),
                ("admin_notes", models.TextField(blank=True, default="")),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "db_table": "orders",
                "indexes": [
                    models.Index(fields=["user_id"], name="idx_orders_user"),
                    models.Index(fields=["order_status"], name="idx_orders_status"),
                    models.Index(fields=["-created_at"], name="idx_orders_date"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("subtotal__gte", 0)), name="order_subtotal_non_negative"),
                    models.CheckConstraint(condition=models.Q(("delivery_fee__gte", 0)), name="order_delivery_fee_non_negative"),
                    models.CheckConstraint(condition=models.Q(("total_amount__gte", 0)), name="order_total_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItemORM",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("product_name", models.CharField(max_length=200)),
                ("product_price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("quantity", models.IntegerField()),
                ("subtotal", models.DecimalField(decimal_places=2, max_digits=10)),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="orders.orderorm")),
                ("product", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="order_items", to="orders.productorm")),
            ],
            options={
                "db_table": "order_items",
                "indexes": [
                    models.Index(fields=["order"], name="idx_order_items_order"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("quantity__gt", 0)), name="order_item_quantity_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentORM",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("provider", models.CharField(choices=[("wave", "Wave"), ("orange_money", "Orange Money"), ("cash", "Espèces"), ("simulation", "Simulation")], max_length=50)),
                ("reference", models.CharField(max_length=200, unique=True)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=10)),
                ("payment_url", models.CharField(blank=True, max_length=500, null=True)),
                ("session_token", models.CharField(blank=True, max_length=200, null=True)),
                ("provider_transaction_id", models.CharField(blank=True, max_length=200, null=True)),
                ("simulated", models.BooleanField(default=False)),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="payments", to="orders.orderorm")),
            ],
            options={
                "db_table": "payments",
                "indexes": [
                    models.Index(fields=["order"], name="idx_payments_order"),
                ],
            },
        ),
        migrations.CreateModel(
            name="IdempotencyKey",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("key", models.CharField(max_length=255)),
                ("user_id", models.UUIDField(blank=True, null=True)),
                ("operation", models.CharField(choices=[("CREATE_ORDER", "Création de commande"), ("INITIATE_PAYMENT", "Initiation de paiement")], max_length=50)),
                ("request_hash", models.CharField(max_length=255)),
                ("status_code", models.IntegerField(default=200)),
                ("response_payload", models.JSONField()),
            ],
            options={
                "db_table": "idempotency_keys",
                "indexes": [
                    models.Index(fields=["request_hash"], name="idx_idempotency_hash"),
                ],
                "unique_together": {("key", "user_id", "operation")},
            },
        ),
        migrations.CreateModel(
            name="EventStore",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("aggregate_id", models.UUIDField()),
                ("aggregate_type", models.CharField(max_length=50)),
                ("event_type", models.CharField(max_length=100)),
                ("event_version", models.CharField(default="1.0", max_length=10)),
                ("event_data", models.JSONField()),
                ("sequence_number", models.BigIntegerField()),
            ],
            options={
                "db_table": "order_events",
                "ordering": ["sequence_number"],
                "indexes": [
                    models.Index(fields=["aggregate_id", "aggregate_type"], name="idx_events_aggregate"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("aggregate_id", "aggregate_type", "sequence_number"), name="uniq_event_sequence"),
                ],
            },
        ),
    ]
