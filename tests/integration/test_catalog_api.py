"""
Integration tests for categories and products.
"""

from comandas.models import Product


class TestCategories:

    def test_create_and_list(self, client, admin_headers):
        response = client.post('/api/categories', json={'name': 'Postres'}, headers=admin_headers)
        assert response.status_code == 201

        listed = client.get('/api/categories').get_json()
        assert [c['name'] for c in listed] == ['Postres']

    def test_duplicate_name_ignoring_case_is_409(self, client, admin_headers):
        assert client.post('/api/categories', json={'name': 'Bebidas'}, headers=admin_headers).status_code == 201

        response = client.post('/api/categories', json={'name': 'bebidas'}, headers=admin_headers)

        assert response.status_code == 409
        assert response.get_json()['message'] == 'La categoría ya existe.'

    def test_blank_name_is_400(self, client, admin_headers):
        response = client.post('/api/categories', json={'name': '   '}, headers=admin_headers)

        assert response.status_code == 400

    def test_rename(self, client, admin_headers, category_id):
        response = client.put(f'/api/categories/{category_id}', json={'name': 'Tragos'}, headers=admin_headers)

        assert response.status_code == 200
        assert response.get_json()['name'] == 'Tragos'

    def test_delete_unlinks_products(self, client, admin_headers, category_id, products, session):
        response = client.delete(f'/api/categories/{category_id}', headers=admin_headers)

        assert response.status_code == 204
        assert session.get(Product, products['coke']).category_id is None

    def test_delete_missing_is_404(self, client, admin_headers):
        assert client.delete('/api/categories/missing', headers=admin_headers).status_code == 404

    def test_writes_need_admin(self, client, waiter_headers, category_id):
        assert client.put(f'/api/categories/{category_id}', json={'name': 'X'}, headers=waiter_headers).status_code == 403
        assert client.post('/api/categories', json={'name': 'X'}).status_code == 401


class TestProducts:

    def test_list_is_public_and_joins_category(self, client, products):
        response = client.get('/api/products')

        assert response.status_code == 200
        by_name = {p['name']: p for p in response.get_json()}
        assert by_name['Coca Cola']['category'] == {'name': 'Bebidas'}
        assert by_name['Empanada']['category'] is None

    def test_create(self, client, admin_headers, category_id):
        response = client.post('/api/products', json={
            'name': 'Agua', 'price': 3.5, 'category_id': category_id
        }, headers=admin_headers)

        assert response.status_code == 201
        data = response.get_json()
        assert data['price'] == 3.5
        assert data['category_id'] == category_id

    def test_create_with_unknown_category_is_404(self, client, admin_headers):
        response = client.post('/api/products', json={
            'name': 'Agua', 'price': 3.5, 'category_id': 'missing'
        }, headers=admin_headers)

        assert response.status_code == 404

    def test_create_with_bad_price_is_400(self, client, admin_headers):
        for price in (0, -1, 'abc', None, True):
            response = client.post('/api/products', json={'name': 'Agua', 'price': price}, headers=admin_headers)
            assert response.status_code == 400

    def test_partial_update(self, client, admin_headers, products):
        response = client.put(f"/api/products/{products['coke']}", json={'price': 12}, headers=admin_headers)

        assert response.status_code == 200
        data = response.get_json()
        assert data['price'] == 12.0
        assert data['name'] == 'Coca Cola'

    def test_update_clears_category(self, client, admin_headers, products):
        response = client.put(f"/api/products/{products['coke']}", json={'category_id': None}, headers=admin_headers)

        assert response.status_code == 200
        assert response.get_json()['category'] is None

    def test_delete_product_used_by_order_is_409(self, client, admin_headers, waiter_headers, products):
        client.post('/api/orders', json={
            'items': [{'product_id': products['coke'], 'quantity': 1}]
        }, headers=waiter_headers)

        response = client.delete(f"/api/products/{products['coke']}", headers=admin_headers)

        assert response.status_code == 409

    def test_delete_unused_product(self, client, admin_headers, products):
        response = client.delete(f"/api/products/{products['empanada']}", headers=admin_headers)

        assert response.status_code == 204
        assert client.get(f"/api/products/{products['empanada']}").status_code == 404

    def test_sub_cent_price_is_400(self, client, admin_headers, session):
        response = client.post('/api/products', json={'name': 'Chicle', 'price': 0.001}, headers=admin_headers)

        assert response.status_code == 400
        assert session.query(Product).count() == 0

    def test_price_beyond_column_is_400(self, client, admin_headers):
        response = client.post('/api/products', json={'name': 'Caviar', 'price': 100000000}, headers=admin_headers)

        assert response.status_code == 400
        assert response.get_json()['message'] == 'El precio excede el máximo permitido.'

    def test_price_rounded_to_cents(self, client, admin_headers):
        response = client.post('/api/products', json={'name': 'Café', 'price': '3.456'}, headers=admin_headers)

        assert response.status_code == 201
        assert response.get_json()['price'] == 3.46

    def test_update_to_sub_cent_price_is_400(self, client, admin_headers, products):
        response = client.put(f"/api/products/{products['coke']}", json={'price': 0.004}, headers=admin_headers)

        assert response.status_code == 400
        assert client.get(f"/api/products/{products['coke']}").get_json()['price'] == 10.0
