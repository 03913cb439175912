import io
import json

from PIL import Image

from menulib.constants.constants import MENU_IMAGES_FOLDER
from menulib.constants.status_codes import http200, http201, http400, http404
from test.utils.fixtures import TEST_BUCKET_NAME
from test.utils.request_utils import make_request, make_multipart_request, make_image_bytes, \
    create_category, create_menu_item, list_s3_keys, response_body


def test_create_menu_item_without_image(chalice_gateway, admin_token):
    category = create_category(chalice_gateway, admin_token, name='Beef')
    response = make_request(chalice_gateway, endpoint='/menu', method='POST', token=admin_token,
                            json_body={'name': 'Beef Fry', 'category': category['id'], 'price': 12.5,
                                       'tags': 'spicy, popular, spicy'})
    assert response['statusCode'] == http201
    body = response_body(response)
    assert body['message'] == 'Menu item created successfully'
    item = body['data']
    assert item['image'] == {'url': '', 'public_id': ''}
    assert item['category'] == {'id': category['id'], 'name': 'Beef', 'slug': 'beef'}
    assert item['sizes'] == {'quarter': 0, 'half': 0, 'full': 0, 'normal': 0, 'schezwan': 0}
    assert item['tags'] == ['spicy', 'popular']
    assert item['is_available'] is True
    assert item['is_vegetarian'] is False
    assert item['is_spicy'] is False
    assert 'search_text' not in item


def test_create_menu_item_validation_message(chalice_gateway, admin_token):
    category = create_category(chalice_gateway, admin_token)
    response = make_request(chalice_gateway, endpoint='/menu', method='POST', token=admin_token,
                            json_body={'category': category['id'], 'price': -1, 'preparation_time': 0})
    assert response['statusCode'] == http400
    assert response_body(response)['message'] == \
        'Menu item name is required, Price cannot be negative, Preparation time must be at least 1 minute'


def test_create_menu_item_bad_boolean(chalice_gateway, admin_token):
    category = create_category(chalice_gateway, admin_token)
    response = make_request(chalice_gateway, endpoint='/menu', method='POST', token=admin_token,
                            json_body={'name': 'Tea', 'category': category['id'], 'price': 1,
                                       'is_spicy': 'maybe'})
    assert response['statusCode'] == http400
    assert response_body(response)['message'] == 'Invalid value for is_spicy'


def test_create_menu_item_unknown_category(chalice_gateway, admin_token):
    response = make_request(chalice_gateway, endpoint='/menu', method='POST', token=admin_token,
                            json_body={'name': 'Beef Fry', 'category': 'missing-category', 'price': 10})
    assert response['statusCode'] == http400
    assert response_body(response) == {'success': False, 'message': 'Category not found'}


def test_create_menu_item_multipart_with_image(chalice_gateway, admin_token, app_context):
    category = create_category(chalice_gateway, admin_token, name='Chicken')
    response = make_multipart_request(
        chalice_gateway, '/menu', token=admin_token,
        fields={'name': 'Chicken Mandhi', 'category': category['id'], 'price': '9.99',
                'is_available': 'false', 'is_spicy': 'TRUE', 'preparation_time': '25',
                'sizes': json.dumps({'half': 5, 'full': 9.5})},
        image=make_image_bytes()
    )
    assert response['statusCode'] == http201, response_body(response)
    item = response_body(response)['data']
    assert item['price'] == 9.99
    assert item['is_available'] is False
    assert item['is_spicy'] is True
    assert item['preparation_time'] == 25
    assert item['sizes'] == {'quarter': 0, 'half': 5, 'full': 9.5, 'normal': 0, 'schezwan': 0}

    public_id = item['image']['public_id']
    assert public_id.startswith(f'{MENU_IMAGES_FOLDER}/')
    assert item['image']['url'] == f'https://{TEST_BUCKET_NAME}.s3.amazonaws.com/{public_id}'
    assert list_s3_keys(app_context) == [public_id]

    stored = app_context.media_store.client.get_object(Bucket=TEST_BUCKET_NAME, Key=public_id)
    image = Image.open(io.BytesIO(stored['Body'].read()))
    assert image.format == 'JPEG'
    assert image.size == (800, 600)


def test_create_menu_item_with_broken_image(chalice_gateway, admin_token, app_context):
    category = create_category(chalice_gateway, admin_token)
    response = make_multipart_request(chalice_gateway, '/menu', token=admin_token,
                                      fields={'name': 'Beef Fry', 'category': category['id'], 'price': '10'},
                                      image=b'definitely not an image')
    assert response['statusCode'] == http400
    assert response_body(response)['message'] == 'Image upload failed'
    assert app_context.menu_items.count() == 0


def test_get_menu_item_by_id(chalice_gateway, admin_token):
    category = create_category(chalice_gateway, admin_token)
    item = create_menu_item(chalice_gateway, admin_token, category['id'])
    response = make_request(chalice_gateway, endpoint=f"/menu/{item['id']}")
    assert response['statusCode'] == http200
    assert response_body(response)['data'] == item


def test_get_missing_menu_item(chalice_gateway):
    response = make_request(chalice_gateway, endpoint='/menu/missing-id')
    assert response['statusCode'] == http404
    assert response_body(response) == {'success': False, 'message': 'Menu item not found'}


def test_update_keeps_omitted_flags(chalice_gateway, admin_token):
    category = create_category(chalice_gateway, admin_token)
    item = create_menu_item(chalice_gateway, admin_token, category['id'], is_vegetarian=True, is_spicy=True)
    response = make_request(chalice_gateway, endpoint=f"/menu/{item['id']}", method='PUT', token=admin_token,
                            json_body={'price': 15})
    assert response['statusCode'] == http200
    updated = response_body(response)['data']
    assert updated['price'] == 15
    assert updated['is_vegetarian'] is True
    assert updated['is_spicy'] is True
    assert updated['is_available'] is True
    assert updated['name'] == item['name']


def test_update_adds_image(chalice_gateway, admin_token, app_context):
    category = create_category(chalice_gateway, admin_token)
    item = create_menu_item(chalice_gateway, admin_token, category['id'])
    response = make_multipart_request(chalice_gateway, f"/menu/{item['id']}", method='PUT', token=admin_token,
                                      fields={'description': 'Slow cooked'}, image=make_image_bytes())
    assert response['statusCode'] == http200
    image = response_body(response)['data']['image']
    assert image['url'] and image['public_id']
    assert image['url'].endswith(image['public_id'])
    assert response_body(response)['data']['description'] == 'Slow cooked'


def test_update_replaces_image(chalice_gateway, admin_token, app_context):
    category = create_category(chalice_gateway, admin_token)
    response = make_multipart_request(chalice_gateway, '/menu', token=admin_token,
                                      fields={'name': 'Fish Fry', 'category': category['id'], 'price': '8'},
                                      image=make_image_bytes(color=(0, 0, 200)))
    created = response_body(response)['data']
    old_public_id = created['image']['public_id']

    response = make_multipart_request(chalice_gateway, f"/menu/{created['id']}", method='PUT', token=admin_token,
                                      fields={}, image=make_image_bytes(color=(0, 200, 0)))
    assert response['statusCode'] == http200
    new_public_id = response_body(response)['data']['image']['public_id']
    assert new_public_id != old_public_id
    assert list_s3_keys(app_context) == [new_public_id]


def test_update_with_unreadable_sizes_keeps_previous(chalice_gateway, admin_token):
    category = create_category(chalice_gateway, admin_token)
    item = create_menu_item(chalice_gateway, admin_token, category['id'], sizes={'half': 6, 'full': 11})
    response = make_multipart_request(chalice_gateway, f"/menu/{item['id']}", method='PUT', token=admin_token,
                                      fields={'sizes': '{half: 7'})
    assert response['statusCode'] == http200
    assert response_body(response)['data']['sizes']['half'] == 6
    assert response_body(response)['data']['sizes']['full'] == 11


def test_update_moves_item_to_missing_category(chalice_gateway, admin_token):
    category = create_category(chalice_gateway, admin_token)
    item = create_menu_item(chalice_gateway, admin_token, category['id'])
    response = make_request(chalice_gateway, endpoint=f"/menu/{item['id']}", method='PUT', token=admin_token,
                            json_body={'category': 'missing-category'})
    assert response['statusCode'] == http400
    assert response_body(response)['message'] == 'Category not found'


def test_update_missing_menu_item(chalice_gateway, admin_token):
    response = make_request(chalice_gateway, endpoint='/menu/missing-id', method='PUT', token=admin_token,
                            json_body={'price': 1})
    assert response['statusCode'] == http404


def test_delete_menu_item(chalice_gateway, admin_token, app_context):
    category = create_category(chalice_gateway, admin_token)
    response = make_multipart_request(chalice_gateway, '/menu', token=admin_token,
                                      fields={'name': 'Beef Fry', 'category': category['id'], 'price': '10'},
                                      image=make_image_bytes())
    item = response_body(response)['data']
    response = make_request(chalice_gateway, endpoint=f"/menu/{item['id']}", method='DELETE', token=admin_token)
    assert response['statusCode'] == http200
    assert response_body(response) == {'success': True, 'message': 'Menu item deleted successfully'}
    assert list_s3_keys(app_context) == []

    response = make_request(chalice_gateway, endpoint=f"/menu/{item['id']}")
    assert response['statusCode'] == http404


def test_list_menu_over_http(chalice_gateway, admin_token):
    category = create_category(chalice_gateway, admin_token, name='Chicken')
    create_menu_item(chalice_gateway, admin_token, category['id'], name='Chicken Curry', sort_order=2)
    create_menu_item(chalice_gateway, admin_token, category['id'], name='Chicken Fry', sort_order=1)
    create_menu_item(chalice_gateway, admin_token, category['id'], name='Lime Juice', is_available=False)

    response = make_request(chalice_gateway, endpoint='/menu', query={'search': 'CHICK', 'page': '1', 'limit': '10'})
    body = response_body(response)
    assert response['statusCode'] == http200
    assert [item['name'] for item in body['data']] == ['Chicken Fry', 'Chicken Curry']
    assert (body['count'], body['total'], body['page'], body['pages']) == (2, 2, 1, 1)

    response = make_request(chalice_gateway, endpoint=f"/menu/category/{category['id']}")
    assert [item['name'] for item in response_body(response)['data']] == ['Chicken Fry', 'Chicken Curry']


def test_list_menu_bad_query(chalice_gateway):
    response = make_request(chalice_gateway, endpoint='/menu', query={'page': '0'})
    assert response['statusCode'] == http400
    assert response_body(response)['message'] == 'page must be a positive integer'

    response = make_request(chalice_gateway, endpoint='/menu', query={'is_available': 'yes'})
    assert response['statusCode'] == http400
    assert response_body(response)['message'] == 'is_available must be true or false'


def test_list_menu_exponent_paging(chalice_gateway):
    for name in ('page', 'limit'):
        response = make_request(chalice_gateway, endpoint='/menu', query={name: '1e5000'})
        assert response['statusCode'] == http400
        assert response_body(response)['message'] == f'{name} must be a positive integer'


def test_create_menu_item_exponent_numbers(chalice_gateway, admin_token, app_context):
    category = create_category(chalice_gateway, admin_token)
    response = make_multipart_request(chalice_gateway, '/menu', token=admin_token,
                                      fields={'name': 'Beef Fry', 'category': category['id'], 'price': '10',
                                              'preparation_time': '1e50', 'sort_order': '9e999999'})
    assert response['statusCode'] == http400
    assert response_body(response)['message'] == 'Invalid value for preparation_time, Invalid value for sort_order'
    assert app_context.menu_items.count() == 0
