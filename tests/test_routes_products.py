from io import BytesIO

from conftest import calls_named


def test_product_list(client, fake_backend):
    r = client.get('/products')
    assert r.status_code == 200
    html = r.get_data(as_text=True)
    assert 'Brownies' in html
    assert 'Rp 50.000' in html


def test_create_product_without_image(client, fake_backend):
    r = client.post('/products/new', data={'name': 'Kue Lapis', 'price': 'Rp 25.000', 'description': ''})
    assert r.status_code == 302
    (_, data, image), = calls_named(fake_backend, 'create_product')
    assert data == {'name': 'Kue Lapis', 'price': 25000}
    assert image is None
    assert r.headers['Location'].endswith('/products/51')


def test_create_product_with_image(client, fake_backend):
    r = client.post('/products/new', data={
        'name': 'Bolu', 'price': '30000', 'description': 'Pandan',
        'image': (BytesIO(b'\x89PNG'), 'bolu.png'),
    }, content_type='multipart/form-data')
    assert r.status_code == 302
    (_, data, image), = calls_named(fake_backend, 'create_product')
    assert data['description'] == 'Pandan'
    assert image.filename == 'bolu.png'


def test_create_product_rejects_bad_input(client, fake_backend):
    r = client.post('/products/new', data={'name': '', 'price': 'abc'})
    assert r.status_code == 200
    assert not calls_named(fake_backend, 'create_product')
    r = client.post('/products/new', data={
        'name': 'Doc', 'price': '100', 'image': (BytesIO(b'%PDF'), 'menu.pdf'),
    }, content_type='multipart/form-data')
    assert 'Only image files are allowed' in r.get_data(as_text=True)
    assert not calls_named(fake_backend, 'create_product')


def test_edit_product_sends_blank_description(client, fake_backend):
    r = client.get('/products/1')
    assert 'Fudgy' in r.get_data(as_text=True)
    r = client.post('/products/1', data={'name': 'Brownies', 'price': '55.000', 'description': ''},
                    follow_redirects=True)
    assert r.status_code == 200
    assert 'Product saved' in r.get_data(as_text=True)
    (_, pid, data, _img), = calls_named(fake_backend, 'update_product')
    assert pid == 1
    assert data == {'name': 'Brownies', 'price': 55000, 'description': ''}


def test_missing_product_is_404(client, fake_backend):
    assert client.get('/products/404').status_code == 404


def test_delete_product_confirms_then_deletes(client, fake_backend):
    r = client.get('/products/2/delete')
    assert r.status_code == 200
    assert 'Nastar' in r.get_data(as_text=True)
    assert not calls_named(fake_backend, 'delete_product')
    r = client.post('/products/2/delete', follow_redirects=True)
    assert 'Product deleted' in r.get_data(as_text=True)
    assert 2 not in fake_backend['products']


def test_product_detail_backend_unavailable_is_flashed(client, fake_backend, monkeypatch):
    from services import backend_api

    def timeout(product_id):
        raise backend_api.BackendUnavailableError('Backend request timed out')

    monkeypatch.setattr(backend_api, 'get_product', timeout)
    r = client.get('/products/1', follow_redirects=True)
    assert r.status_code == 200
    assert 'Backend request timed out' in r.get_data(as_text=True)


def test_oversized_image_is_a_form_error(client, fake_backend):
    from forms import IMAGE_MAX_BYTES

    r = client.post('/products/new', data={
        'name': 'Big', 'price': '1000',
        'image': (BytesIO(b'\0' * (IMAGE_MAX_BYTES + 1)), 'big.png'),
    }, content_type='multipart/form-data')
    assert r.status_code == 200
    assert 'Image must be 10 MB or smaller' in r.get_data(as_text=True)
    assert not calls_named(fake_backend, 'create_product')
