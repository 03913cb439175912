restaurants_pk = 'restaurants'

categories_pk = 'categories'

category_slugs_pk = 'category_slugs'

menu_items_pk = 'menu_items'
