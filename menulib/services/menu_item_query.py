import math
from typing import Dict, List, Optional

from boto3.dynamodb.conditions import Attr

from menulib.constants.constants import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT
from menulib.context import AppContext
from menulib.menu_items import MenuItem, expand_categories
from menulib.utils import app as utils_app, data as utils_data
from menulib.utils.exceptions import ValidationException
from menulib.utils.logger import logger


def parse_positive_int(value, name: str, default: int) -> int:
    if value is None or value == '':
        return default
    try:
        number = utils_data.to_int(value)
    except ValueError:
        raise ValidationException(f'{name} must be a positive integer')
    if number < 1:
        raise ValidationException(f'{name} must be a positive integer')
    return number


def parse_optional_bool(value, name: str) -> Optional[bool]:
    if value is None or value == '':
        return None
    try:
        return utils_data.to_bool(value)
    except ValueError:
        raise ValidationException(f'{name} must be true or false')


class MenuItemQuery:

    def __init__(self, context: AppContext):
        self.context = context

    @staticmethod
    def build_filter(category: Optional[str] = None, search: Optional[str] = None,
                     is_available: Optional[bool] = None):
        conditions = []
        if category:
            conditions.append(Attr('category').eq(category))
        if search and search.strip():
            conditions.append(Attr('search_text').contains(search.strip().lower()))
        if is_available is not None:
            conditions.append(Attr('is_available').eq(is_available))

        filter_expression = None
        for condition in conditions:
            filter_expression = condition if filter_expression is None else filter_expression & condition
        return filter_expression

    def _find_sorted(self, filter_expression) -> List[MenuItem]:
        records = self.context.menu_items.find(filter_expression)
        return sorted((MenuItem(**record) for record in records), key=MenuItem.sort_key)

    def list_items(self, category: Optional[str] = None, search: Optional[str] = None,
                   is_available: Optional[bool] = None, page: int = DEFAULT_PAGE,
                   limit: int = DEFAULT_PAGE_LIMIT) -> Dict:
        menu_items = self._find_sorted(self.build_filter(category, search, is_available))
        total = len(menu_items)
        start = (page - 1) * limit
        page_items = menu_items[start:start + limit]
        logger.info(f'list_items ::: {category=} {search=} {is_available=} {page=} {limit=} '
                    f'{total=} returned={len(page_items)}')
        return {
            'items': expand_categories(self.context, page_items),
            'count': len(page_items),
            'total': total,
            'page': page,
            'pages': math.ceil(total / limit)
        }

    def list_category_items(self, category_id: str) -> List[Dict]:
        menu_items = self._find_sorted(self.build_filter(category=category_id, is_available=True))
        return expand_categories(self.context, menu_items)


@utils_app.log_start_finish
def endpoint_get_menu_items(context: AppContext, query_params: Dict):
    result = MenuItemQuery(context).list_items(
        category=query_params.get('category'),
        search=query_params.get('search'),
        is_available=parse_optional_bool(query_params.get('is_available'), 'is_available'),
        page=parse_positive_int(query_params.get('page'), 'page', DEFAULT_PAGE),
        limit=parse_positive_int(query_params.get('limit'), 'limit', DEFAULT_PAGE_LIMIT)
    )
    return utils_app.success_response(result['items'], count=result['count'], total=result['total'],
                                      page=result['page'], pages=result['pages'])


@utils_app.log_start_finish
def endpoint_get_category_menu_items(context: AppContext, category_id: str):
    menu_items = MenuItemQuery(context).list_category_items(category_id)
    return utils_app.success_response(menu_items, count=len(menu_items))
