"""
Sales report
Generates random sales records in memory and prints the overall total and the
total per category. Aggregation is a pure reduction over the records.
"""
import argparse
import logging
import random
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)

CATEGORIES = ["Electronics", "Clothing", "Books", "Home Decor"]
PRODUCTS = ["TV", "Shirt", "Book", "Vase"]


class SaleRecord(BaseModel):
    date: datetime
    category: str
    product: str
    quantity: int
    price: float

    @property
    def total(self) -> float:
        return self.quantity * self.price


class SalesSummary(BaseModel):
    count: int = 0
    total: float = 0.0
    by_category: Dict[str, float] = {}


def generate_sales(count: int = 1000, rng: Optional[random.Random] = None) -> List[SaleRecord]:
    """Build ``count`` random records; pass a seeded ``rng`` for repeatable output"""
    rng = rng or random.Random()
    records = []
    for _ in range(count):
        records.append(SaleRecord(
            date=datetime.now(timezone.utc),
            category=rng.choice(CATEGORIES),
            product=rng.choice(PRODUCTS),
            quantity=rng.randint(1, 10),
            price=rng.random() * 100,
        ))
    return records


def summarize(records: Iterable[SaleRecord]) -> SalesSummary:
    count = 0
    total = 0.0
    by_category: Dict[str, float] = {}
    for record in records:
        amount = record.total
        count += 1
        total += amount
        by_category[record.category] = by_category.get(record.category, 0.0) + amount
    return SalesSummary(count=count, total=total, by_category=by_category)


def format_report(summary: SalesSummary) -> str:
    lines = [f"Total Sales: ${summary.total:.2f}", "Sales by Category:"]
    for category, amount in summary.by_category.items():
        lines.append(f"{category}: ${amount:.2f}")
    return "\n".join(lines)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Generate random sales and print totals")
    parser.add_argument('--count', type=int, default=1000, help='number of records to generate')
    parser.add_argument('--seed', type=int, default=None, help='seed for repeatable output')
    args = parser.parse_args(argv)
    if args.count < 0:
        parser.error('--count must not be negative')

    records = generate_sales(args.count, random.Random(args.seed))
    summary = summarize(records)
    logger.debug({'msg': 'sales_summarized', 'count': summary.count})
    print(format_report(summary))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
