from datetime import datetime
from typing import Tuple, Dict, List, Callable, Optional

from menulib.constants.substitute_keys import from_db
from menulib.repositories import Repository
from menulib.utils import exceptions
from menulib.utils.data import substitute_keys
from menulib.utils.logger import logger


def now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


class EntityBase:
    record_type = ''

    # field -> validator returning an error message or None
    required_immutable_fields_validation: Dict[str, Callable] = {}
    required_mutable_fields_validation: Dict[str, Callable] = {}
    optional_fields_validation: Dict[str, Callable] = {}

    # field -> function converting a raw request value, raises ValueError for a bad value
    fields_parsers: Dict[str, Callable] = {}

    def __init__(self, id_, **kwargs):
        self.id_: str = id_
        self.date_created: str = kwargs.get('date_created') or now_iso()
        self.date_updated: str = kwargs.get('date_updated') or now_iso()
        self.parse_errors: List[str] = []

    def _to_dict(self) -> Dict:
        """
        Should be re-implemented in each child class
        :return:
        dict of item's attributes
        """
        return {
            'id_': self.id_,
            'date_created': self.date_created,
            'date_updated': self.date_updated
        }

    def _to_db_record(self) -> Dict:
        record = {'record_type': self.record_type, **self._to_dict()}
        return {key: value for key, value in record.items() if value is not None}

    @classmethod
    def parse_request_fields(cls, request_body: Dict) -> Tuple[Dict, List[str]]:
        """
        Converts the known fields of a request, unknown and server owned fields are dropped
        :return:
        clean fields, list of error messages
        """
        clean, errors = {}, []
        for key, parser in cls.fields_parsers.items():
            if key not in request_body:
                continue
            try:
                clean[key] = parser(request_body[key])
            except ValueError as error:
                logger.warning(f'parse_request_fields ::: {key=} {error}')
                errors.append(f'Invalid value for {key}')
        ignored = set(request_body) - set(clean) - set(cls.fields_parsers)
        if ignored:
            logger.info(f'parse_request_fields ::: ignored fields {sorted(ignored)}')
        return clean, errors

    def apply_fields(self, fields: Dict, errors: Optional[List[str]] = None) -> None:
        for key, value in fields.items():
            setattr(self, key, value)
        self.parse_errors.extend(errors or [])

    def get_validation_errors(self) -> List[str]:
        record = self._to_dict()
        messages = list(self.parse_errors)
        for key, validator_func in {
            **self.required_immutable_fields_validation,
            **self.required_mutable_fields_validation,
            **self.optional_fields_validation
        }.items():
            message = validator_func(record.get(key))
            if message:
                messages.append(message)
        return messages

    def validate(self) -> None:
        """
        Raises ValidationException listing every violated field
        """
        messages = self.get_validation_errors()
        if messages:
            message = ', '.join(dict.fromkeys(messages))
            logger.error(f"validate ::: {self.record_type=} {self.id_=} {message}")
            raise exceptions.ValidationException(message)

    def _update_fields_whitelist(self) -> List:
        return [*self.required_mutable_fields_validation.keys(), *self.optional_fields_validation.keys(),
                'date_updated']

    def _create_db_record(self, repository: Repository) -> Dict:
        self.validate()
        record = repository.create(self._to_db_record())
        logger.info(f"_create_db_record ::: {self.record_type=} {self.id_=} successfully created")
        return record

    def _update_db_record(self, repository: Repository, changed_fields) -> Dict:
        self.date_updated = now_iso()
        self.validate()
        record = self._to_dict()
        update_dict = {key: record[key] for key in [*changed_fields, 'date_updated'] if key in record}
        item = repository.update_by_id(self.id_, update_dict, allowed_attrs_to_update=self._update_fields_whitelist())
        logger.info(f"_update_db_record ::: {self.record_type=} {self.id_=} successfully updated "
                    f"fields={sorted(update_dict)}")
        return item

    def _to_ui(self) -> Dict:
        item = self._to_dict()
        substitute_keys(dict_to_process=item, base_keys=from_db)
        return item
