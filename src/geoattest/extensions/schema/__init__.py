from .location import LocationSchemaExtension, is_schema_uid
from .custom import CustomSchemaExtension, register_custom_schema_extension

__all__ = [
    "LocationSchemaExtension",
    "CustomSchemaExtension",
    "register_custom_schema_extension",
    "is_schema_uid",
]
