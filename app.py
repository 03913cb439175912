from chalice import Chalice

from menulib import categories, menu_items, restaurants
from menulib.context import get_context
from menulib.services import category_cascade, menu_item_mutation, menu_item_query
from menulib.utils import app as utils_app
from menulib.utils.logger import log_request, set_request_id

app = Chalice(app_name='restaurant-menu-api')

app.api.binary_types.insert(0, 'multipart/form-data')

UPLOAD_CONTENT_TYPES = ['application/json', 'multipart/form-data']


@app.middleware('http')
def bind_request_id(event, get_response):
    lambda_context = getattr(event, 'lambda_context', None)
    aws_request_id = getattr(lambda_context, 'aws_request_id', None)
    set_request_id(aws_request_id.split('-')[4] if aws_request_id else None)
    log_request(event)
    return get_response(event)


@app.route('/health-check', methods=['GET'], cors=True)
def health_check():
    return {'health': 'check'}


# CATEGORIES
@app.route('/categories', methods=['GET'], cors=True)
@utils_app.request_exception_handler
def get_categories():
    return categories.Category.endpoint_get_all(get_context())


@app.route('/categories/{category_id}', methods=['GET'], cors=True)
@utils_app.request_exception_handler
def get_category_by_id(category_id):
    return categories.Category.init_get_by_id(get_context().categories, category_id).endpoint_get_by_id()


@app.route('/categories', methods=['POST'], cors=True)
def create_category():
    """
    admin operation
    """
    return categories.endpoint_create_category(app.current_request)


@app.route('/categories/{category_id}', methods=['PUT'], cors=True)
def update_category(category_id):
    """
    admin operation
    """
    return categories.endpoint_update_category(app.current_request, category_id)


@app.route('/categories/{category_id}', methods=['DELETE'], cors=True)
def delete_category(category_id):
    """
    admin operation, menu items of the category and their images are deleted too
    """
    return category_cascade.endpoint_delete_category(app.current_request, category_id)


# MENU
@app.route('/menu', methods=['GET'], cors=True)
@utils_app.request_exception_handler
def get_menu_items():
    return menu_item_query.endpoint_get_menu_items(get_context(), dict(app.current_request.query_params or {}))


@app.route('/menu/category/{category_id}', methods=['GET'], cors=True)
@utils_app.request_exception_handler
def get_category_menu_items(category_id):
    return menu_item_query.endpoint_get_category_menu_items(get_context(), category_id)


@app.route('/menu/{menu_item_id}', methods=['GET'], cors=True)
@utils_app.request_exception_handler
def get_menu_item_by_id(menu_item_id):
    context = get_context()
    return menu_items.MenuItem.init_get_by_id(context.menu_items, menu_item_id).endpoint_get_by_id(context)


@app.route('/menu', methods=['POST'], content_types=UPLOAD_CONTENT_TYPES, cors=True)
def create_menu_item():
    """
    admin operation, JSON or multipart/form-data with an optional `image` file
    """
    return menu_item_mutation.endpoint_create_menu_item(app.current_request)


@app.route('/menu/{menu_item_id}', methods=['PUT'], content_types=UPLOAD_CONTENT_TYPES, cors=True)
def update_menu_item(menu_item_id):
    """
    admin operation, a new `image` file replaces the previous image
    """
    return menu_item_mutation.endpoint_update_menu_item(app.current_request, menu_item_id)


@app.route('/menu/{menu_item_id}', methods=['DELETE'], cors=True)
def delete_menu_item(menu_item_id):
    """
    admin operation
    """
    return menu_items.endpoint_delete_menu_item(app.current_request, menu_item_id)


# RESTAURANTS
@app.route('/restaurants', methods=['GET'], cors=True)
@utils_app.request_exception_handler
def get_restaurants():
    return restaurants.Restaurant.endpoint_get_all(get_context())


@app.route('/restaurants/{restaurant_id}', methods=['GET'], cors=True)
@utils_app.request_exception_handler
def get_restaurant_by_id(restaurant_id):
    return restaurants.Restaurant.init_get_by_id(get_context().restaurants, restaurant_id).endpoint_get_by_id()


@app.route('/restaurants', methods=['POST'], cors=True)
def create_restaurant():
    """
    admin operation
    """
    return restaurants.endpoint_create_restaurant(app.current_request)


@app.route('/restaurants/{restaurant_id}', methods=['PUT'], cors=True)
def update_restaurant(restaurant_id):
    """
    admin operation
    """
    return restaurants.endpoint_update_restaurant(app.current_request, restaurant_id)


@app.route('/restaurants/{restaurant_id}', methods=['DELETE'], cors=True)
def delete_restaurant(restaurant_id):
    """
    admin operation
    """
    return restaurants.endpoint_delete_restaurant(app.current_request, restaurant_id)
