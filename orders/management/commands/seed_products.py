"""
Management command to load the farm catalogue.
"""
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from orders.infra.models import ProductORM


PRODUCTS = [
    {"name": "Œufs Bio Fermiers (boîte de 6)", "slug": "oeufs-bio-6", "price": Decimal("1500.00"), "unit": "boîte", "stock_quantity": 50},
    {"name": "Œufs Bio Fermiers (boîte de 12)", "slug": "oeufs-bio-12", "price": Decimal("2800.00"), "unit": "boîte", "stock_quantity": 30},
    {"name": "Lait Frais (1L)", "slug": "lait-frais-1l", "price": Decimal("1200.00"), "unit": "litre", "stock_quantity": 25},
    {"name": "Fromage Artisanal (250g)", "slug": "fromage-artisanal-250g", "price": Decimal("3500.00"), "unit": "pièce", "stock_quantity": 15},
    {"name": "Poulet Fermier Entier", "slug": "poulet-fermier-entier", "price": Decimal("8500.00"), "unit": "pièce", "stock_quantity": 12},
]


class Command(BaseCommand):
    help = 'Create or refresh the product catalogue'

    def add_arguments(self, parser):
        parser.add_argument(
            '--reset-stock',
            action='store_true',
            help='Overwrite stock of existing products with the seed quantity',
        )

    def handle(self, *args, **options):
        reset_stock = options['reset_stock']
        created = 0

        with transaction.atomic():
            for data in PRODUCTS:
                defaults = {k: v for k, v in data.items() if k != "slug"}
                product, was_created = ProductORM.objects.get_or_create(slug=data["slug"], defaults=defaults)
                if was_created:
                    created += 1
                elif reset_stock:
                    product.stock_quantity = data["stock_quantity"]
                    product.save(update_fields=["stock_quantity", "updated_at"])

        self.stdout.write(
            self.style.SUCCESS(f'Seeded {created} new products ({len(PRODUCTS)} in catalogue)')
        )
