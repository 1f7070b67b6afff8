from __future__ import annotations

from decimal import Decimal

from django.core.management.base import BaseCommand

from modules.products.bootstrap import get_product_service
from modules.products.models import Product

CATALOG = [
    ("Personal Checking Account", Decimal("0.00")),
    ("Business Checking Account", Decimal("15.00")),
    ("Savings Account", Decimal("0.00")),
    ("High-Yield Savings Account", Decimal("0.00")),
    ("Certificate of Deposit (1 Year)", Decimal("1000.00")),
    ("Certificate of Deposit (5 Year)", Decimal("1000.00")),
    ("Personal Loan", Decimal("0.00")),
    ("Business Loan", Decimal("0.00")),
    ("Mortgage Loan", Decimal("0.00")),
    ("Credit Card (Basic)", Decimal("0.00")),
    ("Credit Card (Premium)", Decimal("95.00")),
    ("Investment Account", Decimal("0.00")),
]


class Command(BaseCommand):
    help = "Seed database with the default banking product catalog."

    def handle(self, *args, **options):
        self.stdout.write("Creating products...")
        service = get_product_service()

        created = 0
        for name, price in CATALOG:
            if Product.objects.filter(name=name).exists():
                continue
            service.add_product(name, price)
            created += 1

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"products_created={created}, "
                f"products_skipped={len(CATALOG) - created}"
            )
        )
