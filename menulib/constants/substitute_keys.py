# db attribute -> ui key, None means the attribute is never shown to a client
from_db = {
    'id_': 'id',
    'partkey': None,
    'sortkey': None,
    'record_type': None,
    'search_text': None
}
