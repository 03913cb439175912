from typing import Dict, List, Iterable, Optional

from boto3.dynamodb.conditions import Key, Attr

from menulib.utils import db as utils_db
from menulib.utils.db import DbContext
from menulib.utils.logger import logger


class Repository:
    """
    Persistence accessor for one kind of record.
    All records of a kind share a partkey, the record id is the sortkey.
    """

    def __init__(self, db: DbContext, partkey: str):
        self.db = db
        self.partkey = partkey

    def _key(self, id_: str) -> Dict:
        return {'partkey': self.partkey, 'sortkey': id_}

    def _key_condition(self):
        return Key('partkey').eq(self.partkey)

    def find(self, filter_expression=None) -> List[Dict]:
        return utils_db.query_items_paged(self.db.table, self._key_condition(), filter_expression=filter_expression)

    def find_by_field(self, field: str, value) -> List[Dict]:
        return self.find(Attr(field).eq(value))

    def find_by_id(self, id_: str) -> Dict:
        return utils_db.get_db_item(self.db.table, self.partkey, id_)

    def find_by_ids(self, ids: Iterable[str]) -> List[Dict]:
        keys = [self._key(id_) for id_ in dict.fromkeys(ids)]
        if not keys:
            return []
        return utils_db.batch_get_db_items(self.db, keys)

    def exists(self, id_: str) -> bool:
        response = self.db.table.get_item(Key=self._key(id_), ProjectionExpression='sortkey')
        return 'Item' in response

    def create(self, record: Dict, only_if_absent: bool = False) -> Dict:
        item = {**record, **self._key(record['id_'])}
        condition = Attr('partkey').not_exists() if only_if_absent else None
        utils_db.put_db_record(self.db.table, item, condition_expression=condition)
        logger.info(f"Repository.create ::: partkey={self.partkey} id={record['id_']} created")
        return item

    def update_by_id(self, id_: str, update_body: Dict, allowed_attrs_to_update: Iterable,
                     allowed_attrs_to_delete: Optional[Iterable] = ()) -> Dict:
        item = utils_db.update_db_record(
            self.db.table,
            key=self._key(id_),
            update_body=update_body,
            allowed_attrs_to_update=allowed_attrs_to_update,
            allowed_attrs_to_delete=allowed_attrs_to_delete
        )
        logger.info(f"Repository.update_by_id ::: partkey={self.partkey} id={id_} updated")
        return item

    def delete_by_id(self, id_: str) -> None:
        utils_db.delete_db_record(self.db.table, self.partkey, id_)
        logger.info(f"Repository.delete_by_id ::: partkey={self.partkey} id={id_} deleted")

    def delete_many(self, ids: Iterable[str]) -> int:
        return utils_db.delete_db_records(self.db.table, [self._key(id_) for id_ in ids])

    def count(self, filter_expression=None) -> int:
        return utils_db.count_items(self.db.table, self._key_condition(), filter_expression=filter_expression)
