MENU_IMAGES_FOLDER = 'silver-star-menu'

# resize to 800x600 with a fill crop, quality picked by the encoder
MENU_IMAGE_TRANSFORM = {
    'width': 800,
    'height': 600,
    'crop': 'fill',
    'quality': 'auto'
}

AUTO_QUALITY = 82

SIZE_TIERS = ('quarter', 'half', 'full', 'normal', 'schezwan')

DEFAULT_CATEGORY_ICON = 'UtensilsCrossed'
DEFAULT_CATEGORY_COLOR = 'from-amber-400 to-orange-500'

DEFAULT_PAGE = 1
DEFAULT_PAGE_LIMIT = 50

ADMIN_ROLE = 'admin'
