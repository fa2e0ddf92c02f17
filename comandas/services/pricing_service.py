"""
Order pricing and line-item validation.
Prices every requested line from the product's current price.
"""
from decimal import Decimal
from typing import Any, Dict, List, Tuple
from comandas.models import Product
from comandas.exceptions import ValidationError, NotFoundError

CENTS = Decimal('0.01')

# Largest amount a Numeric(10, 2) column holds
MAX_AMOUNT = Decimal('99999999.99')
# order_items.quantity is a 32-bit INTEGER
MAX_QUANTITY = 2**31 - 1


def _validate_item(item: Any) -> Tuple[str, int]:
    """Check one requested line and return (product_id, quantity)."""
    if not isinstance(item, dict):
        raise ValidationError('Cada item de la orden debe ser un objeto con product_id y quantity.')

    product_id = item.get('product_id')
    quantity = item.get('quantity')

    if product_id is None or str(product_id).strip() == '':
        raise ValidationError('Cada item de la orden debe tener un product_id válido.')

    # bool is an int subclass; True must not count as a quantity of 1
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError(
            f'La cantidad del producto {product_id} debe ser un número entero mayor que cero.'
        )
    if quantity > MAX_QUANTITY:
        raise ValidationError(f'La cantidad del producto {product_id} excede el máximo permitido.')

    return str(product_id), quantity


def price_order_items(items: Any, session) -> Tuple[List[Dict[str, Any]], Decimal]:
    """
    Validate requested order lines and price them.

    Args:
        items: List of {'product_id', 'quantity'} dicts as sent by the client
        session: SQLAlchemy session

    Returns:
        (lines, total) where every line carries product_id, quantity,
        item_price (captured unit price) and subtotal.

    Raises:
        ValidationError: Empty list, malformed line or amount out of range
        NotFoundError: A product_id does not exist
    """
    if not isinstance(items, list) or not items:
        raise ValidationError('La orden debe contener al menos un producto.')

    requested = [_validate_item(item) for item in items]

    # Fetch all referenced products in one query
    product_ids = {pid for pid, _ in requested}
    products = session.query(Product).filter(Product.id.in_(product_ids)).all()
    products_dict = {p.id: p for p in products}

    lines = []
    total = Decimal('0.00')

    for product_id, quantity in requested:
        product = products_dict.get(product_id)
        if product is None:
            raise NotFoundError(f'Producto con ID {product_id} no encontrado.')

        unit_price = Decimal(str(product.price)).quantize(CENTS)
        # Compare before quantize: quantize raises once the value outgrows the context precision
        subtotal = unit_price * quantity
        if subtotal > MAX_AMOUNT:
            raise ValidationError(f'El subtotal del producto {product_id} excede el máximo permitido.')
        subtotal = subtotal.quantize(CENTS)
        lines.append({
            'product_id': product_id,
            'quantity': quantity,
            'item_price': unit_price,
            'subtotal': subtotal,
        })
        total += subtotal
        if total > MAX_AMOUNT:
            raise ValidationError(
                f'El total de la orden excede el máximo permitido al agregar el producto {product_id}.'
            )

    return lines, total.quantize(CENTS)
