from .access import fetch_value, has_member  # noqa
from .naming import (  # noqa
    dedupe,
    foreign_key_for_relation_name,
    is_foreign_key,
    pluralize,
    relation_name_for_foreign_key,
    singularize,
    split_comma_delimited,
)
