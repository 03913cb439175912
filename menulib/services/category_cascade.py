"""
Category deletion together with its menu items and their images.

The steps run in order and are not atomic. A failure in the middle leaves the completed steps
applied, each step is logged. A failed batch image delete is logged and the cascade goes on.
A menu item created under the category while the cascade runs can escape the deletion.
"""
from typing import Dict, List

from menulib.categories import Category
from menulib.context import AppContext, get_context
from menulib.menu_items import MenuItem
from menulib.utils import app as utils_app, auth as utils_auth
from menulib.utils.exceptions import MediaStoreException
from menulib.utils.logger import logger


class CategoryCascadeDeletion:

    def __init__(self, context: AppContext):
        self.context = context

    def delete_category_cascade(self, category_id: str) -> Dict:
        logger.info(f'delete_category_cascade ::: attempting to delete category {category_id}')
        category = Category.init_get_by_id(self.context.categories, category_id)

        menu_items: List[MenuItem] = [
            MenuItem(**record) for record in self.context.menu_items.find_by_field('category', category_id)
        ]
        logger.info(f'delete_category_cascade ::: found {len(menu_items)} menu item(s) to delete')

        images_deleted = 0
        items_deleted = 0
        if menu_items:
            images_deleted = self._delete_images([item.image_public_id for item in menu_items])
            items_deleted = self.context.menu_items.delete_many([item.id_ for item in menu_items])
            logger.info(f'delete_category_cascade ::: {items_deleted} menu item(s) deleted')

        self.context.categories.delete_by_id(category.id_)
        if category.slug:
            Category.release_slug(self.context, category.slug)
        logger.info(f'delete_category_cascade ::: category {category_id} deleted')

        return {
            'category_id': category.id_,
            'items_deleted': items_deleted,
            'images_deleted': images_deleted
        }

    def _delete_images(self, public_ids: List[str]) -> int:
        public_ids = [public_id for public_id in public_ids if public_id]
        if not public_ids:
            return 0
        logger.info(f'_delete_images ::: deleting {len(public_ids)} image(s)')
        try:
            return self.context.media_store.delete_many(public_ids)
        except MediaStoreException as error:
            deleted = getattr(error, 'deleted', 0)
            logger.error(f'_delete_images ::: {len(public_ids) - deleted} of {len(public_ids)} images were not deleted, '
                         f'continuing cascade, {error=}')
            return deleted


@utils_app.request_exception_handler
@utils_auth.authenticate
@utils_app.log_start_finish
def endpoint_delete_category(current_request, category_id: str):
    summary = CategoryCascadeDeletion(get_context()).delete_category_cascade(category_id)
    return utils_app.success_response(summary,
                                      message='Category and all associated menu items deleted successfully')
