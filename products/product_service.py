import logging

from src.extensions import backend, snapshots
from products.product import Product

logger = logging.getLogger(__name__)

PRODUCT_FETCH_LIMIT = 1000


class ProductCatalog:
    """Read-mostly local snapshot of the tenant's products and stock.

    Fetched once and reused while invoices are being built; stock figures are
    therefore advisory and the backend re-checks them on creation.
    """

    def __init__(self, products=None, loader=None):
        self._loader = loader
        self._products = None
        if products is not None:
            self._index(products)

    def _index(self, products):
        self._products = {}
        for product in products:
            if not isinstance(product, Product):
                product = Product.from_api(product)
            self._products[product.id] = product

    def _ensure_loaded(self):
        if self._products is None:
            self._index(self._loader() if self._loader else [])
        return self._products

    def all(self):
        return list(self._ensure_loaded().values())

    def get(self, product_id):
        if product_id is None:
            return None
        return self._ensure_loaded().get(str(product_id))

    def stock_of(self, product_id):
        product = self.get(product_id)
        return product.stock if product else 0

    def search(self, term=""):
        """Name/SKU substring match, in-stock products first."""
        term = (term or "").strip().lower()
        matches = [
            p for p in self.all()
            if not term or term in p.name.lower() or term in p.sku.lower()
        ]
        # sort is stable: original order within each group
        return sorted(matches, key=lambda p: 0 if p.in_stock else 1)

    def invalidate(self):
        self._products = None


class ProductService:
    @staticmethod
    def fetch_products(credentials):
        page = backend.get_page(
            "/products",
            credentials,
            params={"limit": PRODUCT_FETCH_LIMIT},
            key="products",
            fallback_message="Error fetching products",
        )
        products = []
        for item in page.items:
            try:
                products.append(Product.from_api(item))
            except ValueError as e:
                logger.warning("Skipping product %s: %s", item.get("_id") or item.get("id"), e)
        return products

    @staticmethod
    def catalog_for(credentials):
        """Catalog backed by the per-tenant snapshot cache."""
        def load():
            return snapshots.get_or_load(
                "products",
                credentials.tenant_key,
                lambda: ProductService.fetch_products(credentials),
            )
        return ProductCatalog(loader=load)

    @staticmethod
    def invalidate(credentials):
        snapshots.invalidate("products", credentials.tenant_key)
        logger.info("Product snapshot invalidated for tenant %s", credentials.tenant_id)
