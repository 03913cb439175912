import functools
import os
from typing import Dict, List, Optional, Iterable, Tuple

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from menulib.utils import boto_clients, exceptions
from menulib.utils.logger import logger, log_exception

need_return_capacity = ('put_item', 'get_item', 'update_item', 'delete_item')

BATCH_GET_MAX_KEYS = 100


def gen_table_name() -> str:
    return os.environ.get('GEN_TABLE_NAME', 'restaurant-menu')


def log_db_call(func):
    """
        should be used for any atomic
        get/put/update/delete item in the code
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger.debug(f'{func.__name__}:: args={args}, kwargs={kwargs}')
        if func.__name__ not in need_return_capacity:
            raise RuntimeError("This decorator only for DynamoDB methods")
        kwargs.update({'ReturnConsumedCapacity': 'TOTAL'})
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            log_exception(e, msg=f'Got exception while trying to {func.__name__}: ')
            raise
        logger.info(f'{func.__name__}:: SUCCESS')
        return result

    return wrapper


class DbContext:
    """
    Owns the DynamoDB resource and the general table handle.
    Repositories receive the context explicitly, nothing reads a module level table.
    """

    def __init__(self, table_name: Optional[str] = None, endpoint_url: Optional[str] = None):
        self.table_name = table_name or gen_table_name()
        self.endpoint_url = endpoint_url if endpoint_url is not None else os.environ.get('ENDPOINT_URL')
        self.resource = None
        self._table = None

    def init(self) -> 'DbContext':
        self.resource = boto_clients.dynamodb_resource(self.endpoint_url)
        table = self.resource.Table(self.table_name)
        for method_name in need_return_capacity:
            setattr(table, method_name, log_db_call(getattr(table, method_name)))
        self._table = table
        logger.info(f'DbContext.init ::: table={self.table_name} endpoint_url={self.endpoint_url}')
        return self

    def teardown(self) -> None:
        self._table = None
        self.resource = None
        logger.info(f'DbContext.teardown ::: table={self.table_name}')

    @property
    def table(self):
        if self._table is None:
            raise RuntimeError('DbContext is not initialized, call init() first')
        return self._table


def is_conditional_check_failed(error: Exception) -> bool:
    return isinstance(error, ClientError) and \
        error.response.get('Error', {}).get('Code') == 'ConditionalCheckFailedException'


def put_db_record(table, item: dict, condition_expression=None) -> None:
    kwargs = {'Item': item}
    if condition_expression is not None:
        kwargs.update({'ConditionExpression': condition_expression})
    table.put_item(**kwargs)


def update_db_record(table, key: dict, update_body: dict, allowed_attrs_to_update: Iterable,
                     allowed_attrs_to_delete: Iterable = ()) -> Dict:
    """
    Updates only whitelisted attributes of an existing record.
    Raises RecordNotFound if there is no record with the key.
    :return:
    the record after update
    """
    set_expr, expr_attr_values, expr_attr_names, remove_expr = generate_update_expression(
        update_body=update_body,
        allowed_attrs_to_update=allowed_attrs_to_update,
        allowed_attrs_to_delete=allowed_attrs_to_delete
    )
    expressions = ' '.join(expr for expr in (set_expr, remove_expr) if expr)
    if not expressions:
        return get_db_item(table, key['partkey'], key['sortkey'])

    update_item_dict = {
        'Key': key,
        'ReturnValues': 'ALL_NEW',
        'UpdateExpression': expressions,
        'ExpressionAttributeNames': expr_attr_names,
        'ConditionExpression': Attr('partkey').exists()
    }
    if expr_attr_values:
        update_item_dict['ExpressionAttributeValues'] = expr_attr_values
    try:
        response = table.update_item(**update_item_dict)
    except ClientError as error:
        if is_conditional_check_failed(error):
            raise exceptions.RecordNotFound(
                f"record partkey={key['partkey']} sortkey={key['sortkey']} not found")
        raise
    return response['Attributes']


def generate_update_expression(update_body: dict, allowed_attrs_to_update: Iterable,
                               allowed_attrs_to_delete: Iterable) -> Tuple:
    """
    Generate expressions to update and delete attributes.
    if a key of update_body is empty and deletable - the attribute is removed, else - attribute is updated.
    Attribute names always go through placeholders, so reserved words (name, size, ...) are safe.
    """
    expr_attr_values = {}
    expr_attr_names = {}
    set_parts = []
    remove_parts = []
    allowed_attrs_to_delete = list(allowed_attrs_to_delete)
    for field in allowed_attrs_to_update:
        if field not in update_body:
            continue
        field_value = update_body[field]
        if field_value is None:
            continue
        expr_attr_names[f'#{field}'] = field
        if field_value in ['', [], {}] and field in allowed_attrs_to_delete:
            remove_parts.append(f'#{field}')
        else:
            expr_attr_values[f':{field}'] = field_value
            set_parts.append(f'#{field}=:{field}')

    set_expr = f"SET {', '.join(set_parts)}" if set_parts else None
    remove_expr = f"REMOVE {', '.join(remove_parts)}" if remove_parts else None
    return set_expr, expr_attr_values, expr_attr_names, remove_expr


def get_db_item(table, partkey, sortkey) -> Dict:
    result = table.get_item(
        Key={
            'partkey': partkey,
            'sortkey': sortkey
        }
    )

    if 'Item' in result:
        return result['Item']
    else:
        logger.error(f"get_db_item ::: record partkey={partkey} sortkey={sortkey} not found")
        raise exceptions.RecordNotFound(f'record partkey={partkey} sortkey={sortkey} not found')


def batch_get_db_items(db: DbContext, keys: List[Dict]) -> List[Dict]:
    """
    Gets records by keys in chunks of 100 (DynamoDB limit), missing keys are skipped
    """
    items = []
    for start in range(0, len(keys), BATCH_GET_MAX_KEYS):
        request_items = {db.table_name: {'Keys': keys[start:start + BATCH_GET_MAX_KEYS]}}
        while request_items:
            response = db.resource.batch_get_item(RequestItems=request_items)
            items.extend(response.get('Responses', {}).get(db.table_name, []))
            request_items = response.get('UnprocessedKeys') or None
    return items


def delete_db_record(table, partkey, sortkey) -> None:
    table.delete_item(Key={'partkey': partkey, 'sortkey': sortkey})


def delete_db_records(table, keys: List[Dict]) -> int:
    """
    Deletes records in one batched write (boto3 splits it into 25 item requests)
    """
    with table.batch_writer() as batch:
        for key in keys:
            batch.delete_item(Key=key)
    logger.info(f'delete_db_records ::: {len(keys)} records deleted')
    return len(keys)


def query_items_paginated(table, key_condition_expression, filter_expression=None, start_key=None, select=None):
    kwargs = {'KeyConditionExpression': key_condition_expression}
    if filter_expression is not None:
        kwargs.update({'FilterExpression': filter_expression})

    if start_key:
        kwargs.update({'ExclusiveStartKey': start_key})

    if select:
        kwargs.update({'Select': select})

    resp = table.query(**kwargs)
    return resp, resp.get('LastEvaluatedKey')


def query_items_paged(table, key_condition_expression, filter_expression=None) -> List[Dict]:
    """ This method shall be used whenever you think the query will
        return more than 1mb of data at once"""
    all_items = []
    last_evaluated_key = None
    while True:
        resp, last_evaluated_key = query_items_paginated(
            table,
            key_condition_expression,
            filter_expression=filter_expression,
            start_key=last_evaluated_key
        )
        all_items.extend(resp['Items'])
        if last_evaluated_key is None:
            break

    return all_items


def count_items(table, key_condition_expression, filter_expression=None) -> int:
    total = 0
    last_evaluated_key = None
    while True:
        resp, last_evaluated_key = query_items_paginated(
            table,
            key_condition_expression,
            filter_expression=filter_expression,
            start_key=last_evaluated_key,
            select='COUNT'
        )
        total += resp['Count']
        if last_evaluated_key is None:
            break
    return total
