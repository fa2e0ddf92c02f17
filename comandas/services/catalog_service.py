"""
Catalog service: categories and products.
Category names are unique regardless of case.
"""
from decimal import Decimal, InvalidOperation
import logging
from typing import Any, Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import joinedload
from comandas.models import Category, Product
from comandas.exceptions import ValidationError, NotFoundError, ConflictError, UpstreamError

logger = logging.getLogger(__name__)

CATEGORY_TAKEN = 'La categoría ya existe.'
_MISSING = object()

# Largest value of products.price, a Numeric(10, 2) column
MAX_PRICE = Decimal('99999999.99')


# =====================================================
# CATEGORIES
# =====================================================

def _clean_category_name(name: Any) -> str:
    if not isinstance(name, str) or name.strip() == '':
        raise ValidationError('El nombre de la categoría es requerido.')
    return name.strip()


def _category_name_taken(session, name: str, exclude_id: Optional[str] = None) -> bool:
    query = session.query(Category.id).filter(func.lower(Category.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    return query.first() is not None


def list_categories(session) -> List[Category]:
    return session.query(Category).order_by(Category.created_at.desc()).all()


def get_category(category_id: str, session) -> Category:
    category = session.get(Category, str(category_id))
    if category is None:
        raise NotFoundError('Categoría no encontrada.')
    return category


def create_category(data: Dict[str, Any], session) -> Category:
    name = _clean_category_name(data.get('name'))
    if _category_name_taken(session, name):
        raise ConflictError(CATEGORY_TAKEN)

    category = Category(name=name)
    session.add(category)
    _commit_category(session, 'create')
    session.refresh(category)
    logger.info(f"Category '{category.name}' created")
    return category


def update_category(category_id: str, data: Dict[str, Any], session) -> Category:
    name = _clean_category_name(data.get('name'))
    category = get_category(category_id, session)

    if _category_name_taken(session, name, exclude_id=category.id):
        raise ConflictError(CATEGORY_TAKEN)

    category.name = name
    _commit_category(session, 'update')
    session.refresh(category)
    return category


def delete_category(category_id: str, session) -> None:
    """Delete a category. Its products stay, without category."""
    category = get_category(category_id, session)
    try:
        session.query(Product).filter(Product.category_id == category.id).update(
            {Product.category_id: None}, synchronize_session=False
        )
        session.delete(category)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error deleting category {category_id}: {e}")
        raise UpstreamError(str(e)) from e


def _commit_category(session, action: str) -> None:
    try:
        session.commit()
    except IntegrityError as e:
        # The unique index catches what the pre-check raced past
        session.rollback()
        logger.warning(f"Integrity error on category {action}: {e}")
        raise ConflictError(CATEGORY_TAKEN)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error on category {action}: {e}")
        raise UpstreamError(str(e)) from e


# =====================================================
# PRODUCTS
# =====================================================

def _parse_price(value: Any) -> Decimal:
    """Price must be a number greater than zero."""
    if isinstance(value, bool) or value is None:
        raise ValidationError('El precio debe ser un número mayor que cero.')
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError('El precio debe ser un número mayor que cero.')
    if not price.is_finite() or price <= 0:
        raise ValidationError('El precio debe ser un número mayor que cero.')
    if price > MAX_PRICE:
        raise ValidationError('El precio excede el máximo permitido.')

    # Sub-cent prices round to 0.00
    price = price.quantize(Decimal('0.01'))
    if price <= 0:
        raise ValidationError('El precio debe ser un número mayor que cero.')
    return price


def _resolve_category_id(session, category_id: Any) -> Optional[str]:
    if category_id is None or category_id == '':
        return None
    if not isinstance(category_id, str):
        raise ValidationError('El ID de categoría debe ser un string UUID o nulo.')
    if session.get(Category, category_id) is None:
        raise NotFoundError('Categoría no encontrada.')
    return category_id


def list_products(session) -> List[Product]:
    return session.query(Product).options(
        joinedload(Product.category)
    ).order_by(Product.created_at.desc()).all()


def get_product(product_id: str, session) -> Product:
    product = session.query(Product).options(
        joinedload(Product.category)
    ).filter(Product.id == str(product_id)).first()
    if product is None:
        raise NotFoundError('Producto no encontrado.')
    return product


def create_product(data: Dict[str, Any], session) -> Product:
    name = data.get('name')
    if not isinstance(name, str) or name.strip() == '':
        raise ValidationError('El nombre del producto es requerido.')

    product = Product(
        name=name.strip(),
        price=_parse_price(data.get('price')),
        category_id=_resolve_category_id(session, data.get('category_id'))
    )
    try:
        session.add(product)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error creating product: {e}")
        raise UpstreamError(str(e)) from e

    session.refresh(product)
    logger.info(f"Product '{product.name}' created at {product.price}")
    return product


def update_product(product_id: str, data: Dict[str, Any], session) -> Product:
    """Partial update: only the fields present in data change."""
    product = get_product(product_id, session)

    name = data.get('name')
    if name is not None:
        if not isinstance(name, str) or name.strip() == '':
            raise ValidationError('El nombre del producto es requerido.')
        product.name = name.strip()

    if data.get('price', _MISSING) is not _MISSING:
        product.price = _parse_price(data['price'])

    if 'category_id' in data:
        product.category_id = _resolve_category_id(session, data['category_id'])

    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error updating product {product_id}: {e}")
        raise UpstreamError(str(e)) from e

    session.refresh(product)
    return product


def delete_product(product_id: str, session) -> None:
    """Delete a product that no order references."""
    product = get_product(product_id, session)
    try:
        session.delete(product)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError('No se puede eliminar el producto porque tiene órdenes asociadas.')
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error deleting product {product_id}: {e}")
        raise UpstreamError(str(e)) from e
