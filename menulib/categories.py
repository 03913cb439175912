import re
import unicodedata
from typing import Dict, List
from uuid import uuid4

from botocore.exceptions import ClientError

from menulib.base_class_entity import EntityBase
from menulib.constants.constants import DEFAULT_CATEGORY_ICON, DEFAULT_CATEGORY_COLOR
from menulib.constants.status_codes import http201
from menulib.context import AppContext, get_context
from menulib.repositories import Repository
from menulib.utils import app as utils_app, auth as utils_auth, data as utils_data, exceptions, validators
from menulib.utils.db import is_conditional_check_failed
from menulib.utils.logger import logger


def slugify(name: str) -> str:
    """
    "Beef & Grill!!" -> "beef-grill"
    """
    ascii_name = unicodedata.normalize('NFKD', name).encode('ascii', 'ignore').decode('ascii')
    slug = re.sub(r'[^a-z0-9]', '-', ascii_name.lower())
    slug = re.sub(r'-+', '-', slug)
    return slug.strip('-')


class Category(EntityBase):
    record_type = 'category'

    required_mutable_fields_validation = {
        'name': validators.string_field('Category name', required=True, max_length=50),
        'is_active': validators.bool_field('is_active'),
        'sort_order': validators.number_field('Sort order', required=True, integer=True),
    }

    optional_fields_validation = {
        'slug': validators.string_field('Slug'),
        'description': validators.string_field('Description', max_length=200),
        'icon': validators.string_field('Icon'),
        'color': validators.string_field('Color'),
    }

    fields_parsers = {
        'name': utils_data.to_str,
        'description': utils_data.to_str,
        'icon': utils_data.to_str,
        'color': utils_data.to_str,
        'is_active': utils_data.to_bool,
        'sort_order': utils_data.to_int,
    }

    def __init__(self, id_, **kwargs):
        EntityBase.__init__(self, id_, **kwargs)

        self.name: str = kwargs.get('name')
        self.slug: str = kwargs.get('slug')
        self.description: str = kwargs.get('description')
        self.icon: str = kwargs.get('icon', DEFAULT_CATEGORY_ICON)
        self.color: str = kwargs.get('color', DEFAULT_CATEGORY_COLOR)
        self.is_active: bool = kwargs.get('is_active', True)
        self.sort_order: int = kwargs.get('sort_order', 0)

    @classmethod
    def init_get_by_id(cls, repository: Repository, category_id):
        logger.info("init_get_by_id ::: started")
        try:
            record = repository.find_by_id(category_id)
        except exceptions.RecordNotFound:
            raise exceptions.RecordNotFound('Category not found')
        return cls(**record)

    @classmethod
    def init_request_create(cls, request_body: Dict):
        logger.info("init_request_create ::: started")
        fields, errors = cls.parse_request_fields(request_body)
        category = cls(id_=str(uuid4()))
        category.apply_fields(fields, errors)
        return category

    def apply_fields(self, fields: Dict, errors: List[str] = None) -> None:
        EntityBase.apply_fields(self, fields, errors)
        if 'name' in fields and isinstance(self.name, str):
            self.slug = slugify(self.name)

    def get_validation_errors(self) -> List[str]:
        messages = EntityBase.get_validation_errors(self)
        if self.name and not self.slug:
            messages.append('Category name must contain letters or digits')
        return messages

    def claim_slug(self, context: AppContext) -> None:
        """
        Slugs are unique: a guard record per slug is written only if it does not exist yet
        """
        try:
            context.category_slugs.create({'id_': self.slug, 'category_id': self.id_}, only_if_absent=True)
        except ClientError as error:
            if is_conditional_check_failed(error):
                raise exceptions.ValidationException(f'Category with slug "{self.slug}" already exists')
            raise

    @staticmethod
    def release_slug(context: AppContext, slug: str) -> None:
        context.category_slugs.delete_by_id(slug)

    @staticmethod
    def release_slug_quietly(context: AppContext, slug: str) -> None:
        try:
            Category.release_slug(context, slug)
        except Exception as error:
            logger.error(f'release_slug_quietly ::: slug guard {slug} was not released, {error=}')

    @staticmethod
    @utils_app.log_start_finish
    def endpoint_get_all(context: AppContext):
        records: List[Dict] = context.categories.find()
        categories = sorted((Category(**record) for record in records), key=lambda cat: (cat.sort_order, cat.name))
        return utils_app.success_response([category._to_ui() for category in categories], count=len(categories))

    @utils_app.log_start_finish
    def endpoint_get_by_id(self):
        return utils_app.success_response(self._to_ui())

    @utils_app.log_start_finish
    def endpoint_create(self, context: AppContext):
        self.validate()
        self.claim_slug(context)
        try:
            self._create_db_record(context.categories)
        except Exception:
            self.release_slug_quietly(context, self.slug)
            raise
        return utils_app.success_response(self._to_ui(), status_code=http201,
                                          message='Category created successfully')

    @utils_app.log_start_finish
    def endpoint_update(self, context: AppContext, request_body: Dict):
        old_slug = self.slug
        fields, errors = self.parse_request_fields(request_body)
        self.apply_fields(fields, errors)
        self.validate()

        slug_changed = self.slug != old_slug
        changed_fields = list(fields.keys())
        if slug_changed:
            self.claim_slug(context)
            changed_fields.append('slug')
        try:
            self._update_db_record(context.categories, changed_fields=changed_fields)
        except Exception:
            if slug_changed:
                self.release_slug_quietly(context, self.slug)
            raise
        if slug_changed and old_slug:
            self.release_slug(context, old_slug)
        return utils_app.success_response(self._to_ui(), message='Category updated successfully')

    def _to_dict(self):
        return {
            'id_': self.id_,
            'name': self.name,
            'slug': self.slug,
            'description': self.description,
            'icon': self.icon,
            'color': self.color,
            'is_active': self.is_active,
            'sort_order': self.sort_order,
            'date_created': self.date_created,
            'date_updated': self.date_updated
        }

    def to_menu_item_ref(self) -> Dict:
        return {'id': self.id_, 'name': self.name, 'slug': self.slug}


@utils_app.request_exception_handler
@utils_auth.authenticate
def endpoint_create_category(current_request):
    body, _ = utils_data.parse_request_body(current_request)
    return Category.init_request_create(body).endpoint_create(get_context())


@utils_app.request_exception_handler
@utils_auth.authenticate
def endpoint_update_category(current_request, category_id: str):
    context = get_context()
    body, _ = utils_data.parse_request_body(current_request)
    return Category.init_get_by_id(context.categories, category_id).endpoint_update(context, body)
