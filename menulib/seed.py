"""
Creates the general table and the default menu categories.

    python -m menulib.seed
"""
import os
from typing import List

from botocore.exceptions import ClientError

from menulib.categories import Category
from menulib.context import AppContext, get_context, close_context
from menulib.utils.auth import create_access_token
from menulib.utils.db import DbContext
from menulib.utils.exceptions import ValidationException
from menulib.utils.logger import logger

DEFAULT_CATEGORIES = [
    {'name': 'Beef', 'description': 'Delicious beef dishes',
     'icon': 'UtensilsCrossed', 'color': 'from-red-600 to-red-700', 'sort_order': 1},
    {'name': 'Chicken', 'description': 'Fresh chicken preparations',
     'icon': 'UtensilsCrossed', 'color': 'from-orange-500 to-red-600', 'sort_order': 2},
    {'name': 'Grill', 'description': 'Grilled specialties',
     'icon': 'UtensilsCrossed', 'color': 'from-orange-400 to-red-500', 'sort_order': 3},
    {'name': 'Mandhi', 'description': 'Traditional Mandhi dishes',
     'icon': 'UtensilsCrossed', 'color': 'from-yellow-500 to-orange-600', 'sort_order': 4},
    {'name': 'Fish', 'description': 'Fresh seafood dishes',
     'icon': 'UtensilsCrossed', 'color': 'from-blue-500 to-cyan-600', 'sort_order': 5},
    {'name': 'Beverages', 'description': 'Refreshing drinks and beverages',
     'icon': 'Coffee', 'color': 'from-purple-500 to-pink-600', 'sort_order': 6},
    {'name': 'Breakfast', 'description': 'Morning breakfast items',
     'icon': 'UtensilsCrossed', 'color': 'from-green-500 to-emerald-600', 'sort_order': 7},
    {'name': 'Biriyani', 'description': 'Aromatic biriyani varieties',
     'icon': 'UtensilsCrossed', 'color': 'from-indigo-500 to-purple-600', 'sort_order': 8},
]


def create_gen_table(db: DbContext) -> None:
    try:
        db.resource.create_table(
            TableName=db.table_name,
            KeySchema=[
                {'AttributeName': 'partkey', 'KeyType': 'HASH'},
                {'AttributeName': 'sortkey', 'KeyType': 'RANGE'}
            ],
            AttributeDefinitions=[
                {'AttributeName': 'partkey', 'AttributeType': 'S'},
                {'AttributeName': 'sortkey', 'AttributeType': 'S'}
            ],
            BillingMode='PAY_PER_REQUEST'
        )
    except ClientError as error:
        if error.response.get('Error', {}).get('Code') == 'ResourceInUseException':
            logger.info(f'create_gen_table ::: table {db.table_name} already exists')
            return
        raise
    db.resource.meta.client.get_waiter('table_exists').wait(TableName=db.table_name)
    logger.info(f'create_gen_table ::: table {db.table_name} created')


def seed_categories(context: AppContext) -> List[Category]:
    """
    Categories whose slug is taken already are skipped, so the seed can be run again
    """
    created = []
    for category_data in DEFAULT_CATEGORIES:
        category = Category.init_request_create(category_data)
        try:
            category.validate()
            category.claim_slug(context)
        except ValidationException as error:
            logger.info(f'seed_categories ::: {category.name} skipped, {error}')
            continue
        category._create_db_record(context.categories)
        created.append(category)
    logger.info(f'seed_categories ::: {len(created)} categories created')
    return created


def main():
    context = get_context()
    try:
        create_gen_table(context.db)
        created = seed_categories(context)
        print(f'Created {len(created)} categories in {context.db.table_name}')
        if os.environ.get('JWT_SECRET'):
            print(f"Admin token: {create_access_token(os.environ.get('SEED_ADMIN_ID', 'admin'))}")
    finally:
        close_context()


if __name__ == '__main__':
    main()
