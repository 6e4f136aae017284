"""Public API: explorer factories and conveniences."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from bubbleplt.core.config import PipelineConfig
from bubbleplt.core.dataset import Catalog
from bubbleplt.core.lookups import BrandLookup, ProductLookup
from bubbleplt.core.pipeline import BubbleExplorer, Renderer


def explorer(
    products: Catalog | Iterable[Mapping[str, Any]],
    best_brand: Any = None,
    best_products: Any = None,
    config: Optional[PipelineConfig] = None,
    renderer: Optional[Renderer] = None,
) -> BubbleExplorer:
    """Return an explorer over in-memory tables.

    ``products`` may be a ready ``Catalog`` or raw row mappings; the two
    lookup tables accept either of their supported shapes.
    """
    catalog = products if isinstance(products, Catalog) else Catalog.from_records(products)
    return BubbleExplorer(
        catalog,
        BrandLookup(best_brand),
        ProductLookup(best_products),
        config=config,
        renderer=renderer,
    )


def open_explorer(
    data_dir: Path | str,
    config: Optional[PipelineConfig] = None,
    renderer: Optional[Renderer] = None,
) -> BubbleExplorer:
    """Load the three standard files from *data_dir* (blocking)."""
    data_dir = Path(data_dir)
    return asyncio.run(
        BubbleExplorer.open(
            data_dir / "cosmetic_p.csv",
            data_dir / "best_brand_for_skin_types.json",
            data_dir / "best_products_for_brand.json",
            config=config,
            renderer=renderer,
        )
    )


# Expose so callers can do: from bubbleplt import plt; plt.explorer(rows)
plt = type(
    "plt",
    (),
    {"explorer": staticmethod(explorer), "open_explorer": staticmethod(open_explorer)},
)()
