"""
CSV export of dashboard datasets.
"""

from typing import Dict, List, Sequence

import polars as pl

EXPORT_DATASETS = ("kpis", "trends", "products")

TREND_COLUMNS = ("bucketKey", "revenue", "orders", "units")
PRODUCT_COLUMNS = ("productId", "name", "category", "revenue", "units", "orders", "avgOrderValue")


def _rows_to_csv(rows: List[Dict], columns: Sequence[str]) -> str:
    if not rows:
        return pl.DataFrame(schema={column: pl.Utf8 for column in columns}).write_csv()
    frame = pl.DataFrame({column: [row.get(column) for row in rows] for column in columns})
    return frame.write_csv()


def kpis_to_csv(kpis: Dict[str, Dict]) -> str:
    """One line per KPI: metric, value, deltaPct"""
    rows = [
        {"metric": name, "value": float(kpi["value"]), "deltaPct": float(kpi["deltaPct"])}
        for name, kpi in kpis.items()
    ]
    return _rows_to_csv(rows, ("metric", "value", "deltaPct"))


def trends_to_csv(trends: List[Dict]) -> str:
    return _rows_to_csv(trends, TREND_COLUMNS)


def products_to_csv(products: List[Dict]) -> str:
    return _rows_to_csv(products, PRODUCT_COLUMNS)
