from typing import Dict, List
from uuid import uuid4

from menulib.base_class_entity import EntityBase
from menulib.constants.status_codes import http201
from menulib.context import AppContext, get_context
from menulib.repositories import Repository
from menulib.utils import app as utils_app, auth as utils_auth, data as utils_data, exceptions, validators
from menulib.utils.logger import logger


class Restaurant(EntityBase):
    record_type = 'restaurant'

    required_immutable_fields_validation = {
        'admin_id': validators.string_field('Admin', required=True),
    }

    required_mutable_fields_validation = {
        'name': validators.string_field('Restaurant name', required=True, max_length=100),
        'is_active': validators.bool_field('is_active'),
    }

    optional_fields_validation = {
        'logo_image': validators.string_field('Logo image'),
        'location_link': validators.string_field('Location link'),
        'website_link': validators.string_field('Website link'),
        'instagram_link': validators.string_field('Instagram link'),
        'facebook_link': validators.string_field('Facebook link'),
        'whatsapp_number': validators.string_field('WhatsApp number'),
        'phone_number': validators.string_field('Phone number'),
        'plan_id': validators.string_field('Plan'),
        'validity_of_plan': validators.string_field('Validity of plan'),
    }

    fields_parsers = {
        'name': utils_data.to_str,
        'logo_image': utils_data.to_str,
        'admin_id': utils_data.to_str,
        'location_link': utils_data.to_str,
        'website_link': utils_data.to_str,
        'instagram_link': utils_data.to_str,
        'facebook_link': utils_data.to_str,
        'whatsapp_number': utils_data.to_str,
        'phone_number': utils_data.to_str,
        'is_active': utils_data.to_bool,
        'plan_id': utils_data.to_str,
        'validity_of_plan': utils_data.to_iso_date,
    }

    def __init__(self, id_, **kwargs):
        EntityBase.__init__(self, id_, **kwargs)

        self.name: str = kwargs.get('name')
        self.logo_image: str = kwargs.get('logo_image')
        self.admin_id: str = kwargs.get('admin_id')
        self.location_link: str = kwargs.get('location_link')
        self.website_link: str = kwargs.get('website_link')
        self.instagram_link: str = kwargs.get('instagram_link')
        self.facebook_link: str = kwargs.get('facebook_link')
        self.whatsapp_number: str = kwargs.get('whatsapp_number')
        self.phone_number: str = kwargs.get('phone_number')
        self.is_active: bool = kwargs.get('is_active', True)
        self.plan_id: str = kwargs.get('plan_id')
        self.validity_of_plan: str = kwargs.get('validity_of_plan')

    @classmethod
    def init_get_by_id(cls, repository: Repository, restaurant_id):
        logger.info("init_get_by_id ::: started")
        try:
            record = repository.find_by_id(restaurant_id)
        except exceptions.RecordNotFound:
            raise exceptions.RecordNotFound('Restaurant not found')
        return cls(**record)

    @classmethod
    def init_request_create(cls, request_body: Dict, admin_id: str):
        logger.info("init_request_create ::: started")
        fields, errors = cls.parse_request_fields(request_body)
        fields.setdefault('admin_id', admin_id)
        restaurant = cls(id_=str(uuid4()))
        restaurant.apply_fields(fields, errors)
        return restaurant

    @staticmethod
    @utils_app.log_start_finish
    def endpoint_get_all(context: AppContext):
        records: List[Dict] = context.restaurants.find()
        restaurants = [Restaurant(**record)._to_ui() for record in records]
        restaurants.sort(key=lambda rest: rest['date_created'])
        logger.info(f"endpoint_get_all ::: returning restaurants={[rest['id'] for rest in restaurants]}")
        return utils_app.success_response(restaurants, count=len(restaurants))

    @utils_app.log_start_finish
    def endpoint_get_by_id(self):
        return utils_app.success_response(self._to_ui())

    @utils_app.log_start_finish
    def endpoint_create(self, context: AppContext):
        self._create_db_record(context.restaurants)
        return utils_app.success_response(self._to_ui(), status_code=http201,
                                          message='Restaurant created successfully')

    @utils_app.log_start_finish
    def endpoint_update(self, context: AppContext, request_body: Dict):
        fields, errors = self.parse_request_fields(request_body)
        fields.pop('admin_id', None)
        self.apply_fields(fields, errors)
        self._update_db_record(context.restaurants, changed_fields=fields.keys())
        return utils_app.success_response(self._to_ui(), message='Restaurant updated successfully')

    @utils_app.log_start_finish
    def endpoint_delete(self, context: AppContext):
        context.restaurants.delete_by_id(self.id_)
        return utils_app.success_response(message='Restaurant deleted successfully')

    def _to_dict(self):
        return {
            'id_': self.id_,
            'name': self.name,
            'logo_image': self.logo_image,
            'admin_id': self.admin_id,
            'location_link': self.location_link,
            'website_link': self.website_link,
            'instagram_link': self.instagram_link,
            'facebook_link': self.facebook_link,
            'whatsapp_number': self.whatsapp_number,
            'phone_number': self.phone_number,
            'is_active': self.is_active,
            'plan_id': self.plan_id,
            'validity_of_plan': self.validity_of_plan,
            'date_created': self.date_created,
            'date_updated': self.date_updated
        }


@utils_app.request_exception_handler
@utils_auth.authenticate
def endpoint_create_restaurant(current_request):
    body, _ = utils_data.parse_request_body(current_request)
    return Restaurant.init_request_create(body, admin_id=current_request.auth_result['user_id']).\
        endpoint_create(get_context())


@utils_app.request_exception_handler
@utils_auth.authenticate
def endpoint_update_restaurant(current_request, restaurant_id: str):
    context = get_context()
    body, _ = utils_data.parse_request_body(current_request)
    return Restaurant.init_get_by_id(context.restaurants, restaurant_id).endpoint_update(context, body)


@utils_app.request_exception_handler
@utils_auth.authenticate
def endpoint_delete_restaurant(current_request, restaurant_id: str):
    context = get_context()
    return Restaurant.init_get_by_id(context.restaurants, restaurant_id).endpoint_delete(context)
