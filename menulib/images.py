from io import BytesIO
from typing import Dict

from PIL import Image, ImageOps

from menulib.constants.constants import AUTO_QUALITY

CROP_MODES = ('fill', 'fit')


def get_quality(transform: Dict) -> int:
    quality = transform.get('quality', 'auto')
    if quality == 'auto':
        return AUTO_QUALITY
    return int(quality)


def apply_transform(body: bytes, transform: Dict) -> bytes:
    """
    Resizes an image the way the transform profile describes and encodes it as JPEG.
    'fill' crops to exactly width x height around the center, 'fit' keeps the aspect ratio inside the box.
    Raises PIL.UnidentifiedImageError if body is not an image.
    """
    image: Image = Image.open(BytesIO(body))
    image = ImageOps.exif_transpose(image).convert('RGB')
    size = (int(transform['width']), int(transform['height']))
    crop = transform.get('crop', 'fill')
    if crop not in CROP_MODES:
        raise ValueError(f'Unknown crop mode {crop}')

    if crop == 'fill':
        image = ImageOps.fit(image, size, method=Image.LANCZOS)
    else:
        image.thumbnail(size=size)

    buf = BytesIO()
    image.save(buf, format='JPEG', optimize=True, quality=get_quality(transform))
    return buf.getvalue()
