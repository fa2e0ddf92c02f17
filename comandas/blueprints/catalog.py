"""Catalog blueprint: categories and products. Reads are public, writes are admin-only."""
import logging
from flask import Blueprint, jsonify
from comandas.database import get_session
from comandas.decorators.permissions import admin_only
from comandas.services import catalog_service
from comandas.utils.http import get_json_body

catalog_bp = Blueprint('catalog', __name__)

logger = logging.getLogger(__name__)


# =====================================================
# CATEGORIES
# =====================================================

@catalog_bp.route('/categories', methods=['GET'])
def list_categories():
    categories = catalog_service.list_categories(get_session())
    return jsonify([c.to_dict() for c in categories]), 200


@catalog_bp.route('/categories/<category_id>', methods=['GET'])
def get_category(category_id):
    category = catalog_service.get_category(category_id, get_session())
    return jsonify(category.to_dict()), 200


@catalog_bp.route('/categories', methods=['POST'])
@admin_only
def create_category():
    category = catalog_service.create_category(get_json_body(), get_session())
    return jsonify(category.to_dict()), 201


@catalog_bp.route('/categories/<category_id>', methods=['PUT'])
@admin_only
def update_category(category_id):
    category = catalog_service.update_category(category_id, get_json_body(), get_session())
    return jsonify(category.to_dict()), 200


@catalog_bp.route('/categories/<category_id>', methods=['DELETE'])
@admin_only
def delete_category(category_id):
    catalog_service.delete_category(category_id, get_session())
    return '', 204


# =====================================================
# PRODUCTS
# =====================================================

@catalog_bp.route('/products', methods=['GET'])
def list_products():
    """List products joined with their category name."""
    products = catalog_service.list_products(get_session())
    return jsonify([p.to_dict() for p in products]), 200


@catalog_bp.route('/products/<product_id>', methods=['GET'])
def get_product(product_id):
    product = catalog_service.get_product(product_id, get_session())
    return jsonify(product.to_dict()), 200


@catalog_bp.route('/products', methods=['POST'])
@admin_only
def create_product():
    product = catalog_service.create_product(get_json_body(), get_session())
    return jsonify(product.to_dict()), 201


@catalog_bp.route('/products/<product_id>', methods=['PUT'])
@admin_only
def update_product(product_id):
    data = get_json_body()
    logger.debug(f"PUT /products/{product_id} - body: {data}")
    product = catalog_service.update_product(product_id, data, get_session())
    return jsonify(product.to_dict()), 200


@catalog_bp.route('/products/<product_id>', methods=['DELETE'])
@admin_only
def delete_product(product_id):
    catalog_service.delete_product(product_id, get_session())
    return '', 204
