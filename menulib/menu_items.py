from decimal import Decimal
from typing import Dict, List, Optional, Iterable
from uuid import uuid4

from menulib.base_class_entity import EntityBase
from menulib.categories import Category
from menulib.constants.constants import SIZE_TIERS
from menulib.context import AppContext, get_context
from menulib.repositories import Repository
from menulib.utils import app as utils_app, auth as utils_auth, data as utils_data, exceptions, validators
from menulib.utils.logger import logger


def empty_image() -> Dict:
    return {'url': '', 'public_id': ''}


def empty_sizes() -> Dict:
    return {tier: Decimal('0.00') for tier in SIZE_TIERS}


def to_sizes(value) -> Dict:
    """
    Full tier map, missing tiers are 0 and unknown tiers are dropped
    """
    if not isinstance(value, dict):
        raise ValueError(f'{value!r} is not a size map')
    return {
        tier: utils_data.to_decimal(0 if value.get(tier) in (None, '') else value.get(tier))
        for tier in SIZE_TIERS
    }


def validate_sizes(value) -> Optional[str]:
    if not isinstance(value, dict):
        return 'Sizes must be a map of prices'
    if any(price < 0 for price in value.values()):
        return 'Size price cannot be negative'
    return None


def validate_image(value) -> Optional[str]:
    if not isinstance(value, dict):
        return 'Image must be a map'
    url, public_id = value.get('url', ''), value.get('public_id', '')
    if bool(url) != bool(public_id):
        return 'Image url and public_id must be set together'
    return None


class MenuItem(EntityBase):
    record_type = 'menu_item'

    required_mutable_fields_validation = {
        'name': validators.string_field('Menu item name', required=True, max_length=100),
        'category': validators.string_field('Category', required=True),
        'price': validators.number_field('Price', required=True, minimum=0,
                                         minimum_message='Price cannot be negative'),
        'sizes': validate_sizes,
        'image': validate_image,
        'is_available': validators.bool_field('is_available'),
        'is_vegetarian': validators.bool_field('is_vegetarian'),
        'is_spicy': validators.bool_field('is_spicy'),
        'preparation_time': validators.number_field(
            'Preparation time', required=True, integer=True, minimum=1,
            minimum_message='Preparation time must be at least 1 minute'),
        'sort_order': validators.number_field('Sort order', required=True, integer=True),
        'tags': validators.list_of_strings_field('Tags'),
        'search_text': validators.string_field('Search text'),
    }

    optional_fields_validation = {
        'description': validators.string_field('Description', max_length=500),
    }

    fields_parsers = {
        'name': utils_data.to_str,
        'description': utils_data.to_str,
        'category': utils_data.to_str,
        'price': utils_data.to_decimal,
        'sizes': to_sizes,
        'is_available': utils_data.to_bool,
        'is_vegetarian': utils_data.to_bool,
        'is_spicy': utils_data.to_bool,
        'preparation_time': utils_data.to_int,
        'sort_order': utils_data.to_int,
        'tags': utils_data.parse_tags,
    }

    def __init__(self, id_, **kwargs):
        EntityBase.__init__(self, id_, **kwargs)

        self.name: str = kwargs.get('name')
        self.description: str = kwargs.get('description')
        self.category: str = kwargs.get('category')
        self.price: Decimal = kwargs.get('price')
        self.sizes: Dict = kwargs.get('sizes') or empty_sizes()
        self.image: Dict = kwargs.get('image') or empty_image()
        self.is_available: bool = kwargs.get('is_available', True)
        self.is_vegetarian: bool = kwargs.get('is_vegetarian', False)
        self.is_spicy: bool = kwargs.get('is_spicy', False)
        self.preparation_time: int = kwargs.get('preparation_time', 15)
        self.sort_order: int = kwargs.get('sort_order', 0)
        self.tags: List[str] = kwargs.get('tags', [])

    @classmethod
    def init_get_by_id(cls, repository: Repository, menu_item_id):
        logger.info("init_get_by_id ::: started")
        try:
            record = repository.find_by_id(menu_item_id)
        except exceptions.RecordNotFound:
            raise exceptions.RecordNotFound('Menu item not found')
        return cls(**record)

    @classmethod
    def init_new(cls):
        return cls(id_=str(uuid4()))

    @property
    def search_text(self) -> str:
        return f"{self.name or ''} {self.description or ''}".lower()

    @property
    def image_public_id(self) -> str:
        return (self.image or {}).get('public_id') or ''

    @staticmethod
    def sort_key(item: 'MenuItem'):
        return item.sort_order, item.name

    @utils_app.log_start_finish
    def endpoint_get_by_id(self, context: AppContext):
        return utils_app.success_response(expand_categories(context, [self])[0])

    @utils_app.log_start_finish
    def endpoint_delete(self, context: AppContext):
        if self.image_public_id:
            try:
                context.media_store.delete_one(self.image_public_id)
            except Exception as error:
                logger.error(f'endpoint_delete ::: image {self.image_public_id} of menu item {self.id_} '
                             f'was not deleted, {error=}')
        context.menu_items.delete_by_id(self.id_)
        return utils_app.success_response(message='Menu item deleted successfully')

    def _to_dict(self):
        return {
            'id_': self.id_,
            'name': self.name,
            'description': self.description,
            'category': self.category,
            'price': self.price,
            'sizes': self.sizes,
            'image': self.image,
            'is_available': self.is_available,
            'is_vegetarian': self.is_vegetarian,
            'is_spicy': self.is_spicy,
            'preparation_time': self.preparation_time,
            'sort_order': self.sort_order,
            'tags': self.tags,
            'search_text': self.search_text,
            'date_created': self.date_created,
            'date_updated': self.date_updated
        }

    def to_ui(self, category_ref: Optional[Dict]) -> Dict:
        item = self._to_ui()
        item['category'] = category_ref
        return item


def load_category_refs(context: AppContext, category_ids: Iterable[str]) -> Dict[str, Dict]:
    """
    id -> {id, name, slug} for the categories that exist
    """
    records = context.categories.find_by_ids(category_id for category_id in category_ids if category_id)
    return {record['id_']: Category(**record).to_menu_item_ref() for record in records}


def expand_categories(context: AppContext, menu_items: List[MenuItem]) -> List[Dict]:
    refs = load_category_refs(context, (item.category for item in menu_items))
    return [item.to_ui(refs.get(item.category)) for item in menu_items]


@utils_app.request_exception_handler
@utils_auth.authenticate
def endpoint_delete_menu_item(current_request, menu_item_id: str):
    context = get_context()
    return MenuItem.init_get_by_id(context.menu_items, menu_item_id).endpoint_delete(context)
