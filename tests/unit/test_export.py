"""
Unit Tests - CSV Export
"""
from storefront_analytics.analytics.export import kpis_to_csv, products_to_csv, trends_to_csv


class TestExport:

    def test_empty_trends_have_header_only(self):
        assert trends_to_csv([]).splitlines() == ["bucketKey,revenue,orders,units"]

    def test_kpis(self):
        csv = kpis_to_csv({
            "grossRevenue": {"value": 290.0, "deltaPct": 45.0},
            "orders": {"value": 3, "deltaPct": 50.0},
        })

        lines = csv.splitlines()
        assert lines[0] == "metric,value,deltaPct"
        assert lines[1].startswith("grossRevenue,290")
        assert lines[2].startswith("orders,3")

    def test_products_keep_column_order(self):
        csv = products_to_csv([
            {
                "productId": "p1",
                "name": "Laptop",
                "category": "Electronics",
                "revenue": 200.0,
                "units": 2,
                "orders": 1,
                "avgOrderValue": 200.0,
            }
        ])

        header, row = csv.splitlines()
        assert header == "productId,name,category,revenue,units,orders,avgOrderValue"
        assert row.startswith("p1,Laptop,Electronics,")

    def test_values_with_commas_are_quoted(self):
        csv = products_to_csv([{"productId": "p9", "name": "Pens, blue", "category": "Office"}])

        assert '"Pens, blue"' in csv
