"""
Seed data loader for ShopBot.

Loads products, orders and users from JSON, CSV or Excel files and maps
them onto the core data model.

Architecture: read the whole file with pandas, then build one record per
row. Rows without an identifier or with unusable values are skipped and
counted; a few examples are logged so bad exports are easy to track down.
"""

import json
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple, TypeVar

import pandas as pd

from core.context import Category, Order, OrderItem, OrderStatus, Product, User
from core.stores import InMemoryCatalogStore, InMemoryOrderStore, InMemoryUserStore
from core.structured_logging import get_logger

_logger = get_logger("catalog_loader")

T = TypeVar("T")

# Alternative column names seen in storefront exports
COLUMN_ALIASES = {
    '_id': 'id',
    'product_id': 'id',
    'sku': 'id',
    'order_id': 'id',
    'product_name': 'name',
    'ratings': 'rating',
    'num_ratings': 'rating_count',
    'review_count': 'rating_count',
    'quantity_in_stock': 'stock',
    'specs': 'specifications',
    'userid': 'user_id',
    'user': 'user_id',
    'total': 'total_amount',
    'createdat': 'created_at',
    'order_date': 'created_at',
    'order_items': 'items',
    'shipping_address': 'address',
}

# Never loaded, whatever the export carries
SENSITIVE_COLUMNS = {'password', 'password_hash', 'token', 'otp'}

MAX_REPORTED_ERRORS = 10


# =============================================================================
# PARSING HELPERS
# =============================================================================

def _missing(value: Any) -> bool:
    if isinstance(value, (list, dict, tuple)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _clean(value: Any) -> Any:
    """NaN -> None, numpy scalars -> Python scalars."""
    if _missing(value):
        return None
    if hasattr(value, 'item') and not isinstance(value, (list, dict, str)):
        return value.item()
    return value


def _decode_json(value: Any) -> Any:
    """
    Decode JSON-encoded cells.

    CSV and Excel exports store lists and maps as JSON strings; anything
    that does not parse is returned unchanged.
    """
    value = _clean(value)
    if isinstance(value, str) and value.strip()[:1] in ('[', '{'):
        try:
            return json.loads(value)
        except ValueError:
            return value
    return value


def _as_list(value: Any) -> List[str]:
    """
    Feature cells to a list of strings.

    Examples:
    - ["Fast charge", "5G"] -> ["Fast charge", "5G"]
    - '["Fast charge"]' -> ["Fast charge"]
    - "Fast charge | 5G" -> ["Fast charge", "5G"]
    """
    value = _decode_json(value)
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if not _missing(v) and str(v).strip()]
    parts = str(value).replace(';', '|').split('|')
    return [p.strip() for p in parts if p.strip()]


def _as_float(value: Any, default: float = 0.0) -> float:
    value = _clean(value)
    if value is None or value == '':
        return default
    if isinstance(value, str):
        value = value.replace(',', '').replace('₹', '').strip()
    return float(value)


def _as_int(value: Any, default: int = 0) -> int:
    return int(_as_float(value, default))


def _as_datetime(value: Any):
    if _missing(value):
        return None
    return pd.to_datetime(value).to_pydatetime()


def _as_address(value: Any) -> dict:
    value = _decode_json(value)
    if isinstance(value, dict):
        return {str(k): str(v) for k, v in value.items() if not _missing(v)}
    if value:
        return {'street': str(value)}
    return {}


# =============================================================================
# FILE READING
# =============================================================================

def read_frame(path: str) -> pd.DataFrame:
    """
    Read a seed file into a DataFrame by extension.

    Supports .json (array of records), .csv, .xlsx and .xls. Column names
    are lowercased, stripped, and mapped through COLUMN_ALIASES.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: For unsupported extensions
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Seed file not found: {path}")

    suffix = file_path.suffix.lower()
    if suffix == '.json':
        df = pd.read_json(file_path, orient='records', dtype=False, convert_dates=False)
    elif suffix == '.csv':
        df = pd.read_csv(file_path, dtype={'id': str, 'user_id': str})
    elif suffix in ('.xlsx', '.xls'):
        df = pd.read_excel(file_path)
    else:
        raise ValueError(f"Unsupported seed file type: {suffix}")

    renamed = {}
    for col in df.columns:
        key = str(col).strip().lower().replace(' ', '_')
        renamed[col] = COLUMN_ALIASES.get(key, key)
    df = df.rename(columns=renamed)
    df = df.drop(columns=[c for c in df.columns if c in SENSITIVE_COLUMNS])

    _logger.info(
        f"Read {len(df)} rows from {file_path.name}",
        extra={"event": "seed_file_read", "rows": len(df), "columns": len(df.columns)},
    )
    return df


def _load_rows(df: pd.DataFrame, build: Callable[[pd.Series], T], kind: str) -> List[T]:
    """Build one record per row; rows without id or with bad values are skipped."""
    records = []
    skipped = 0
    errors = []

    for idx, row in df.iterrows():
        if 'id' not in row or _missing(row.get('id')) or not str(row.get('id')).strip():
            skipped += 1
            if len(errors) < MAX_REPORTED_ERRORS:
                errors.append(f"Row {idx}: No id")
            continue
        try:
            records.append(build(row))
        except (TypeError, ValueError, KeyError) as e:
            skipped += 1
            if len(errors) < MAX_REPORTED_ERRORS:
                errors.append(f"Row {idx}: {type(e).__name__}: {e}")

    _logger.info(
        f"Loaded {len(records)} {kind}",
        extra={"event": "seed_loaded", "kind": kind, "loaded": len(records), "skipped": skipped},
    )
    if skipped:
        _logger.warning(
            f"Skipped {skipped} {kind} rows",
            extra={"event": "seed_rows_skipped", "kind": kind, "skipped": skipped, "examples": errors[:5]},
        )
    return records


# =============================================================================
# RECORD BUILDERS
# =============================================================================

def _product_from_row(row: pd.Series) -> Product:
    title = _clean(row.get('title')) or _clean(row.get('name'))
    if not title:
        raise ValueError("No title")
    name = _clean(row.get('name'))
    return Product(
        id=str(_clean(row['id'])).strip(),
        title=str(title).strip(),
        category=Category.parse(_clean(row.get('category'))),
        brand=str(_clean(row.get('brand')) or ''),
        price=_as_float(row.get('price')),
        rating=_as_float(row.get('rating')),
        stock=_as_int(row.get('stock')),
        specifications=_decode_json(row.get('specifications')),
        features=_as_list(row.get('features')),
        description=str(_clean(row.get('description')) or ''),
        rating_count=_as_int(row.get('rating_count')),
        name=str(name).strip() if name else None,
    )


def _order_item(raw: dict) -> OrderItem:
    return OrderItem(
        product_id=str(raw['product_id']) if raw.get('product_id') is not None else None,
        title=str(raw.get('title') or raw.get('name') or ''),
        brand=str(raw.get('brand') or ''),
        quantity=_as_int(raw.get('quantity'), 1),
        price=_as_float(raw.get('price')),
    )


def _order_from_row(row: pd.Series) -> Order:
    user_id = _clean(row.get('user_id'))
    if user_id is None:
        raise ValueError("No user_id")
    raw_items = _decode_json(row.get('items')) or []
    if not isinstance(raw_items, list):
        raise ValueError("items must be a list")
    kwargs = {}
    created_at = _as_datetime(row.get('created_at'))
    if created_at is not None:
        kwargs['created_at'] = created_at
    return Order(
        id=str(_clean(row['id'])).strip(),
        user_id=str(user_id),
        items=[_order_item(item) for item in raw_items if isinstance(item, dict)],
        total_amount=_as_float(row.get('total_amount')),
        status=OrderStatus(str(_clean(row.get('status')) or 'pending').strip().lower()),
        address=_as_address(row.get('address')),
        **kwargs,
    )


def _user_from_row(row: pd.Series) -> User:
    return User(
        id=str(_clean(row['id'])).strip(),
        name=str(_clean(row.get('name')) or ''),
        email=str(_clean(row.get('email')) or ''),
        phone=str(_clean(row.get('phone')) or ''),
        address=_as_address(row.get('address')),
    )


# =============================================================================
# PUBLIC API
# =============================================================================

def load_products(path: str) -> List[Product]:
    """
    Load catalog products.

    Args:
        path: JSON, CSV or Excel export of the product collection

    Returns:
        List of Product objects; malformed rows are skipped
    """
    return _load_rows(read_frame(path), _product_from_row, "products")


def load_orders(path: str) -> List[Order]:
    """Load customer orders (items and address may be JSON-encoded)."""
    return _load_rows(read_frame(path), _order_from_row, "orders")


def load_users(path: str) -> List[User]:
    """Load public user profiles. Credential columns are dropped on read."""
    return _load_rows(read_frame(path), _user_from_row, "users")


def get_catalog_statistics(products: List[Product]) -> dict:
    """
    Get statistics about loaded products.

    Returns dict with:
    - total: Total product count
    - by_category: Count by category value
    - brands: Number of distinct brands
    - price_min / price_max: Price range (None when empty)
    - avg_rating: Average rating, one decimal
    """
    stats = {
        'total': len(products),
        'by_category': {},
        'brands': 0,
        'price_min': None,
        'price_max': None,
        'avg_rating': 0.0,
    }
    if not products:
        return stats

    for product in products:
        category = product.category.value
        stats['by_category'][category] = stats['by_category'].get(category, 0) + 1

    stats['brands'] = len({p.brand.lower() for p in products if p.brand})
    prices = [p.price for p in products]
    stats['price_min'] = min(prices)
    stats['price_max'] = max(prices)
    stats['avg_rating'] = round(sum(p.rating for p in products) / len(products), 1)
    return stats


def build_stores(
    products_path: str,
    orders_path: Optional[str] = None,
    users_path: Optional[str] = None,
) -> Tuple[InMemoryCatalogStore, InMemoryOrderStore, InMemoryUserStore]:
    """Load seed files into in-memory stores; missing order/user paths give empty stores."""
    catalog = InMemoryCatalogStore(load_products(products_path))
    orders = InMemoryOrderStore(load_orders(orders_path) if orders_path else [])
    users = InMemoryUserStore(load_users(users_path) if users_path else [])
    return catalog, orders, users
