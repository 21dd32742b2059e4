from collections.abc import Sequence
from typing import Any

import pandas as pd

from sector_order.ordering.index import SectorIndex
from sector_order.ordering.validator import OrderValidator
from sector_order.product.core import Product

SECTOR_COLUMNS = [
    "sector_code",
    "sector_name",
    "count",
    "min_sequence",
    "max_sequence",
    "gaps",
    "duplicates",
    "status",
]


class OrderAuditor:
    """
    Data-integrity audit of a product collection's ordering.

    One row per catalog sector plus a collection-level OK / CORRUPT summary.
    """

    def __init__(self, index: SectorIndex) -> None:
        self.index = index
        self.codec = index.codec
        self.catalog = index.catalog
        self.validator = OrderValidator(index)

    def positions_frame(self, products: Sequence[Product]) -> pd.DataFrame:
        """
        Decoded positions, sorted by sector then sequence.

        sector_code and label are null for products a strict codec cannot
        place in the catalog.
        """
        rows = []
        for p in products:
            code = self.codec.member_sector(p.order)
            sequence = self.codec.decode_sequence(p.order)
            rows.append(
                {
                    "id": p.id,
                    "name": p.name,
                    "order": p.order,
                    "sector_index": self.codec.decode_sector_index(p.order),
                    "sector_code": code,
                    "sequence": sequence,
                    "label": f"{code}-{sequence:03d}" if code is not None else None,
                    "valid_value": self.validator.validate_value(p.order) is None,
                }
            )
        df = pd.DataFrame(
            rows,
            columns=[
                "id",
                "name",
                "order",
                "sector_index",
                "sector_code",
                "sequence",
                "label",
                "valid_value",
            ],
        )
        return df.sort_values(["sector_index", "sequence"], kind="stable").reset_index(drop=True)

    def sector_frame(self, products: Sequence[Product]) -> pd.DataFrame:
        positions = self.positions_frame(products)
        rows: list[dict[str, Any]] = []
        for sector in self.catalog:
            seqs = positions.loc[positions["sector_code"] == sector.code, "sequence"]
            count = len(seqs)
            duplicates = int(seqs.duplicated().sum())
            expected = set(range(1, count + 1))
            gaps = len(expected - set(seqs.tolist()))

            if duplicates:
                status = "DUPLICATES"
            elif gaps:
                status = "GAPS"
            else:
                status = "OK"

            rows.append(
                {
                    "sector_code": sector.code,
                    "sector_name": sector.name,
                    "count": count,
                    "min_sequence": int(seqs.min()) if count else 0,
                    "max_sequence": int(seqs.max()) if count else 0,
                    "gaps": gaps,
                    "duplicates": duplicates,
                    "status": status,
                }
            )
        return pd.DataFrame(rows, columns=SECTOR_COLUMNS)

    def get_report(self, products: Sequence[Product]) -> dict[str, Any]:
        sectors = self.sector_frame(products)
        positions = self.positions_frame(products)
        invalid_values = positions.loc[~positions["valid_value"], "id"].tolist()
        broken = sectors.loc[sectors["status"] != "OK", "sector_code"].tolist()
        unique = self.validator.validate_uniqueness(products)

        return {
            "products": len(products),
            "sectors": {
                row["sector_code"]: {"count": int(row["count"]), "status": row["status"]}
                for row in sectors.to_dict("records")
            },
            "broken_sectors": broken,
            "invalid_values": invalid_values,
            "unique_orders": unique,
            "status": "OK" if not broken and not invalid_values and unique else "CORRUPT",
        }
