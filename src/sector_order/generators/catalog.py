"""Demo bakery catalogs with valid (dense) ordering."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

import numpy as np
from faker import Faker

from sector_order.ordering.codec import OrderCodec
from sector_order.product.core import Product, SectorCatalog

if TYPE_CHECKING:
    from numpy.random import Generator

BAKERY_ITEMS = [
    "Pan de agua",
    "Pan sobao",
    "Croissant",
    "Quesito",
    "Mallorca",
    "Bizcocho",
    "Flan",
    "Tres leches",
    "Harina",
    "Azúcar",
    "Mantequilla",
    "Levadura",
    "Leche",
    "Huevos",
    "Queso crema",
    "Guayaba",
    "Helado de vainilla",
    "Fresas",
    "Masa de hojaldre",
    "Chocolate",
]


class BakeryProductGenerator:
    """
    Generates product collections spread across the sector catalog.

    Output is dense per sector and shuffled, so callers must go through
    the sector index to see the ordering.
    """

    def __init__(self, catalog: SectorCatalog, seed: int = 42) -> None:
        self.catalog = catalog
        self.codec = OrderCodec(catalog)
        self.seed = seed
        self.rng: Generator = np.random.default_rng(seed)

        self._faker = Faker("es_ES")
        Faker.seed(seed)
        self.providers: list[str] = [self._faker.company() for _ in range(8)]

    def generate_products(self, n_products: int = 40) -> list[Product]:
        if n_products < 0:
            raise ValueError("n_products must be non-negative")

        sector_idx = self.rng.integers(0, len(self.catalog), size=n_products)
        counters = dict.fromkeys(self.catalog.codes, 0)
        products: list[Product] = []

        for i, idx in enumerate(sector_idx, start=1):
            code = self.catalog.codes[int(idx)]
            counters[code] += 1
            item = BAKERY_ITEMS[int(self.rng.integers(0, len(BAKERY_ITEMS)))]
            products.append(
                Product(
                    id=f"PRD-{i:04d}",
                    name=f"{item} {self._faker.word()}",
                    order=self.codec.encode(code, counters[code]),
                    sku=self._faker.bothify("SKU-####-??").upper(),
                    provider_id=self.providers[int(self.rng.integers(0, len(self.providers)))],
                    enabled=bool(self.rng.random() > 0.1),
                )
            )

        return [products[int(i)] for i in self.rng.permutation(n_products)]

    def corrupt(self, products: list[Product], n_faults: int = 3) -> list[Product]:
        """
        Copy of `products` with gaps and duplicates injected.

        Faults alternate between pushing a sequence past the sector end
        (gap) and copying another product's order (duplicate).
        """
        result = list(products)
        if len(result) < 2:
            return result

        picks = self.rng.choice(len(result), size=min(n_faults, len(result)), replace=False)
        for fault, i in enumerate(picks):
            i = int(i)
            victim = result[i]
            if fault % 2 == 0:
                sector, seq = self.codec.decode(victim.order)
                result[i] = replace(victim, order=self.codec.encode(sector, min(seq + 50, 999)))
            else:
                donor = result[(i + 1) % len(result)]
                result[i] = replace(victim, order=donor.order)
        return result
