from typing import Optional

from menulib.constants import keys_structure
from menulib.repositories import Repository
from menulib.utils.db import DbContext
from menulib.utils.logger import logger
from menulib.utils.s3 import MediaStore


class AppContext:
    """
    Everything a request needs to reach the document store and the media store
    """

    def __init__(self, db: DbContext, media_store: MediaStore):
        self.db = db
        self.media_store = media_store
        self.restaurants = Repository(db, keys_structure.restaurants_pk)
        self.categories = Repository(db, keys_structure.categories_pk)
        self.category_slugs = Repository(db, keys_structure.category_slugs_pk)
        self.menu_items = Repository(db, keys_structure.menu_items_pk)

    @classmethod
    def from_environ(cls) -> 'AppContext':
        return cls(db=DbContext().init(), media_store=MediaStore())

    def teardown(self) -> None:
        self.db.teardown()


_context: Optional[AppContext] = None


def get_context() -> AppContext:
    global _context
    if _context is None:
        _context = AppContext.from_environ()
        logger.info('get_context ::: application context created')
    return _context


def set_context(context: Optional[AppContext]) -> None:
    global _context
    _context = context


def close_context() -> None:
    global _context
    if _context is not None:
        _context.teardown()
        _context = None
