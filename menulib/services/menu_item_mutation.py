from typing import Dict, Optional

from menulib.constants.constants import MENU_IMAGES_FOLDER, MENU_IMAGE_TRANSFORM
from menulib.constants.status_codes import http201
from menulib.context import AppContext, get_context
from menulib.menu_items import MenuItem, expand_categories
from menulib.utils import app as utils_app, auth as utils_auth, data as utils_data
from menulib.utils.exceptions import ImageUploadFailed, MediaStoreException, ValidationException
from menulib.utils.logger import logger
from menulib.utils.s3 import UploadResult


class MenuItemMutation:
    """
    Create and update of menu items, including the image upload/replace/cleanup.
    Only the fields present in a request are normalised and merged into the item.
    """

    def __init__(self, context: AppContext):
        self.context = context

    def create_item(self, fields: Dict, image: Optional[bytes] = None) -> Dict:
        menu_item = MenuItem.init_new()
        self._apply_request_fields(menu_item, fields)
        menu_item.validate()
        self._check_category_exists(menu_item.category)

        uploaded = self._upload_image(image) if image else None
        if uploaded:
            menu_item.image = {'url': uploaded.url, 'public_id': uploaded.public_id}
        try:
            menu_item._create_db_record(self.context.menu_items)
        except Exception:
            if uploaded:
                self._delete_image_quietly(uploaded.public_id)
            raise
        return expand_categories(self.context, [menu_item])[0]

    def update_item(self, menu_item_id: str, fields: Dict, image: Optional[bytes] = None) -> Dict:
        menu_item = MenuItem.init_get_by_id(self.context.menu_items, menu_item_id)
        old_category = menu_item.category
        old_public_id = menu_item.image_public_id

        changed_fields = self._apply_request_fields(menu_item, fields)
        menu_item.validate()
        if menu_item.category != old_category:
            self._check_category_exists(menu_item.category)

        uploaded = self._upload_image(image) if image else None
        if uploaded:
            menu_item.image = {'url': uploaded.url, 'public_id': uploaded.public_id}
            changed_fields.append('image')
        try:
            menu_item._update_db_record(self.context.menu_items, changed_fields=[*changed_fields, 'search_text'])
        except Exception:
            if uploaded:
                self._delete_image_quietly(uploaded.public_id)
            raise
        if uploaded and old_public_id:
            self._delete_image_quietly(old_public_id)
        return expand_categories(self.context, [menu_item])[0]

    def _apply_request_fields(self, menu_item: MenuItem, fields: Dict) -> list:
        fields = dict(fields)
        if 'sizes' in fields:
            fields['sizes'] = self._decode_sizes(fields['sizes'], menu_item.sizes)
        clean, errors = MenuItem.parse_request_fields(fields)
        menu_item.apply_fields(clean, errors)
        return list(clean.keys())

    @staticmethod
    def _decode_sizes(value, previous: Dict):
        """
        Sizes come as a map or as its JSON text, unreadable JSON keeps the previous sizes
        """
        try:
            return utils_data.parse_json_field(value)
        except ValueError as error:
            logger.warning(f'_decode_sizes ::: sizes {value!r} are not a valid JSON, keeping previous, {error=}')
            return previous

    def _check_category_exists(self, category_id: str) -> None:
        if not self.context.categories.exists(category_id):
            raise ValidationException('Category not found')

    def _upload_image(self, image: bytes) -> UploadResult:
        try:
            return self.context.media_store.upload(image, folder=MENU_IMAGES_FOLDER, transform=MENU_IMAGE_TRANSFORM)
        except MediaStoreException as error:
            logger.error(f'_upload_image ::: {error}')
            raise ImageUploadFailed('Image upload failed')

    def _delete_image_quietly(self, public_id: str) -> None:
        try:
            self.context.media_store.delete_one(public_id)
        except MediaStoreException as error:
            logger.error(f'_delete_image_quietly ::: image {public_id} was not deleted, {error=}')


@utils_app.request_exception_handler
@utils_auth.authenticate
@utils_app.log_start_finish
def endpoint_create_menu_item(current_request):
    fields, image = utils_data.parse_request_body(current_request)
    menu_item = MenuItemMutation(get_context()).create_item(fields, image)
    return utils_app.success_response(menu_item, status_code=http201, message='Menu item created successfully')


@utils_app.request_exception_handler
@utils_auth.authenticate
@utils_app.log_start_finish
def endpoint_update_menu_item(current_request, menu_item_id: str):
    fields, image = utils_data.parse_request_body(current_request)
    menu_item = MenuItemMutation(get_context()).update_item(menu_item_id, fields, image)
    return utils_app.success_response(menu_item, message='Menu item updated successfully')
