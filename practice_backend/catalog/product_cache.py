# practice_backend/catalog/product_cache.py

import json
import logging

from redis.exceptions import RedisError

from practice_backend.database.models import Product
from practice_backend.errors import NotFound
from practice_backend.security.input_validator import page_count

# Cache-aside product catalog.
#
# The full listing is served from Redis under a fixed key and refilled from
# the store on a miss. Creating a product does not touch the cache, so the
# listing may lag writes by up to the TTL. Point reads and searches always go
# to the store and are always fresh.

logger = logging.getLogger(__name__)

PRODUCT_LIST_CACHE_KEY = "products:all"
DEFAULT_CACHE_TTL = 3600


class ProductCatalog:
    def __init__(self, session, cache, ttl=DEFAULT_CACHE_TTL):
        self.session = session
        self.cache = cache
        self.ttl = ttl

    def _read_cache(self):
        try:
            raw = self.cache.get(PRODUCT_LIST_CACHE_KEY)
        except RedisError as e:
            logger.warning("Product cache read failed, using store: %s", e)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable product cache entry")
            return None

    def _write_cache(self, products):
        try:
            self.cache.setex(PRODUCT_LIST_CACHE_KEY, self.ttl, json.dumps(products))
        except RedisError as e:
            logger.warning("Product cache write failed: %s", e)

    def list_all(self):
        """Return ``(products, cached)`` for the full catalog."""
        products = self._read_cache()
        if products is not None:
            return products, True

        products = [p.to_summary() for p in self.session.query(Product).order_by(Product.id)]
        self._write_cache(products)
        return products, False

    def search(self, q=None, category=None, min_price=None, max_price=None, page=1, limit=20):
        query = self.session.query(Product)
        if q:
            pattern = f"%{q}%"
            query = query.filter(Product.name.ilike(pattern) | Product.description.ilike(pattern))
        if category:
            query = query.filter(Product.category == category)
        if min_price is not None:
            query = query.filter(Product.price >= min_price)
        if max_price is not None:
            query = query.filter(Product.price <= max_price)

        total = query.count()
        products = query.order_by(Product.id).offset((page - 1) * limit).limit(limit).all()
        return {
            "products": [p.to_dict() for p in products],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": page_count(total, limit),
            },
        }

    def get(self, product_id):
        product = self.session.get(Product, product_id)
        if product is None:
            raise NotFound("Product not found")
        return product

    def create(self, name, price, description=None, category=None, stock=None, image_url=None):
        product = Product(
            name=name,
            price=price,
            description=description,
            category=category,
            stock=stock,
            image_url=image_url,
        )
        self.session.add(product)
        self.session.commit()
        return product
