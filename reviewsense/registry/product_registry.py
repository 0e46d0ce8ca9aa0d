"""
Product Registry - tracked products whose reviews are monitored.

Manages registration, removal and persistence of products.
"""

import json
import os
import shutil
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

from reviewsense.utils.storage import validate_product_id

logger = logging.getLogger(__name__)


@dataclass
class TrackedProduct:
    """A product registered for review monitoring."""
    product_id: str  # Steam appid
    name: str
    enabled: bool = True
    created_at: str = ""  # ISO timestamp

    @classmethod
    def from_dict(cls, data: dict) -> "TrackedProduct":
        return cls(
            product_id=str(data["product_id"]),
            name=data["name"],
            enabled=data.get("enabled", True),
            created_at=data.get("created_at", "")
        )

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "enabled": self.enabled,
            "created_at": self.created_at
        }


class ProductRegistry:
    """
    Registry of tracked products, capped at `max_products`.

    Persisted as a single JSON file with an atomic write and a
    .backup copy of the previous version.
    """

    def __init__(self, registry_path: str, max_products: int = 5):
        """
        Initialize registry from disk or create new empty registry.

        Args:
            registry_path: Path to products.json file
            max_products: Registration limit
        """
        self.registry_path = registry_path
        self.max_products = max_products
        self.products: Dict[str, TrackedProduct] = {}  # product_id -> TrackedProduct
        self.version = "1.0.0"

        if os.path.exists(registry_path):
            self._load()
        else:
            logger.info(f"No existing registry found at {registry_path}, initializing empty registry")

    def _load(self) -> None:
        """Load registry from disk."""
        try:
            with open(self.registry_path, 'r', encoding='utf-8') as f:
                data = json.load(f)

            # Legacy format: bare list of products
            if isinstance(data, list):
                products_list = data
            else:
                self.version = data.get("version", "1.0.0")
                products_list = data.get("products", [])

            self.products = {}
            for product_data in products_list:
                product = TrackedProduct.from_dict(product_data)
                self.products[product.product_id] = product

            logger.info(f"Loaded {len(self.products)} products from registry")

        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse registry JSON: {e}")
            self._try_restore_from_backup()

    def _try_restore_from_backup(self) -> None:
        """Attempt to restore from backup file if main registry is corrupted."""
        backup_path = f"{self.registry_path}.backup"
        if not os.path.exists(backup_path):
            logger.warning("No backup file found. Starting with empty registry.")
            self.products = {}
            return

        logger.warning(f"Attempting to restore from backup: {backup_path}")
        try:
            with open(backup_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Backup restoration failed: {e}. Starting with empty registry.")
            self.products = {}
            return

        products_list = data if isinstance(data, list) else data.get("products", [])
        self.products = {
            p.product_id: p for p in (TrackedProduct.from_dict(item) for item in products_list)
        }
        logger.info("Successfully restored from backup")

    def add_product(self, product_id: str, name: str) -> TrackedProduct:
        """
        Register a new product.

        Raises:
            ValueError: If the id is invalid, the name is blank, the id is
                already registered, or the limit is reached
        """
        product_id = validate_product_id(product_id)
        if not name or not name.strip():
            raise ValueError("Missing product name")
        if product_id in self.products:
            raise ValueError(f"Product already exists: {product_id}")
        if len(self.products) >= self.max_products:
            raise ValueError(f"Registry limited to {self.max_products} products")

        product = TrackedProduct(
            product_id=product_id,
            name=name.strip(),
            created_at=datetime.now(timezone.utc).isoformat()
        )
        self.products[product_id] = product
        logger.info(f"Registered product {product_id} - '{product.name}'")
        return product

    def remove_product(self, product_id: str) -> bool:
        """Returns True if the product was registered."""
        removed = self.products.pop(str(product_id), None)
        if removed:
            logger.info(f"Removed product {product_id}")
        return removed is not None

    def get_product(self, product_id: str) -> Optional[TrackedProduct]:
        return self.products.get(str(product_id))

    def list_products(self, enabled_only: bool = False) -> List[TrackedProduct]:
        """Products, newest registration first."""
        products = [p for p in self.products.values() if p.enabled or not enabled_only]
        return sorted(products, key=lambda p: p.created_at, reverse=True)

    def save(self) -> None:
        """
        Persist registry to disk with atomic write pattern.
        Creates backup before write.
        """
        if os.path.exists(self.registry_path):
            backup_path = f"{self.registry_path}.backup"
            shutil.copy(self.registry_path, backup_path)
            logger.debug(f"Created backup: {backup_path}")

        data = {
            "version": self.version,
            "last_updated": datetime.now(timezone.utc).isoformat(),
            "products": [p.to_dict() for p in self.products.values()]
        }

        directory = os.path.dirname(self.registry_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        temp_path = f"{self.registry_path}.tmp"
        try:
            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(temp_path, self.registry_path)
            logger.info(f"Registry saved: {len(self.products)} products")
        except Exception as e:
            logger.error(f"Failed to save registry: {e}")
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise


# Design Rationale and Trade-offs:
#
# 1. Why a dict keyed by product id?
#    - O(1) duplicate check and lookup
#    - Trade-off: Registration order is kept via created_at, not the container
#
# 2. Why backup-and-restore for corrupted files?
#    - A crash during a hand edit should not lose the tracked list
#    - Trade-off: Only one backup level
#
# 3. Why accept the legacy list format?
#    - Older registries were a bare JSON list of products
#    - Trade-off: Two shapes to read, one shape written
